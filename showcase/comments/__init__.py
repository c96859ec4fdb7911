"""Talent comment threads.

Note: Router is not exported here to avoid circular imports.
Import directly from showcase.comments.router when needed.
"""

from .models import COMMENTS_TABLES_CQL, TALENT_COMMENTS, TalentComment, create_comment


__all__ = [
    "COMMENTS_TABLES_CQL",
    "TALENT_COMMENTS",
    "TalentComment",
    "create_comment",
]
