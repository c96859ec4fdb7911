"""Client-side aggregation of store records into view models."""

from showcase.aggregation.filtering import filter_views
from showcase.aggregation.joins import JoinResolver
from showcase.aggregation.orchestrator import AggregationOrchestrator, parse_sort_key
from showcase.aggregation.personalization import PersonalizationResolver
from showcase.aggregation.views import (
    AggregatedListView,
    AggregatedView,
    ErrorDescriptor,
    ViewState,
)


__all__ = [
    "AggregatedListView",
    "AggregatedView",
    "AggregationOrchestrator",
    "ErrorDescriptor",
    "JoinResolver",
    "PersonalizationResolver",
    "ViewState",
    "filter_views",
    "parse_sort_key",
]
