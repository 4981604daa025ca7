"""Services for database access."""

from examdesk.services import exam_query

__all__ = ["exam_query"]
