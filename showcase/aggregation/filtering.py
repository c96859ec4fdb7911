"""Client-side text filtering over aggregated views."""

from collections.abc import Iterable, Sequence
from typing import Any, TypeVar


V = TypeVar("V")


def _field_values(view: Any, field: str) -> Iterable[str]:
    source = view.record if hasattr(view, "record") else view
    value = source.get(field) if isinstance(source, dict) else getattr(source, field, None)
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return (str(v) for v in value if v is not None)
    return (str(value),)


def filter_views(views: Sequence[V], text: str | None, fields: Sequence[str]) -> list[V]:
    """Keep views where any of ``fields`` contains ``text`` (case-insensitive).

    List-valued fields (tags) match when any element contains the text. An
    empty or blank filter returns every view unchanged.
    """
    needle = (text or "").strip().lower()
    if not needle:
        return list(views)
    return [
        view
        for view in views
        if any(
            needle in value.lower()
            for field in fields
            for value in _field_values(view, field)
        )
    ]
