"""Collection registry shared by both store backends."""

from showcase.comments.models import COMMENTS_TABLES_CQL, TALENT_COMMENTS
from showcase.profiles.models import PROFILES, PROFILES_TABLES_CQL
from showcase.service_requests.models import (
    HOSTEL_SERVICES,
    SERVICE_REQUESTS_TABLES_CQL,
)
from showcase.talents.models import (
    LIKES_COUNT,
    TALENT_LIKES,
    TALENTS,
    TALENTS_TABLES_CQL,
)


COLLECTIONS = (TALENTS, TALENT_LIKES, TALENT_COMMENTS, PROFILES, HOSTEL_SERVICES)

DERIVED_COUNTS = (LIKES_COUNT,)

ALL_TABLES_CQL = [
    *PROFILES_TABLES_CQL,
    *TALENTS_TABLES_CQL,
    *COMMENTS_TABLES_CQL,
    *SERVICE_REQUESTS_TABLES_CQL,
]
