"""API routes package."""

from examdesk.api.routes import exams

__all__ = [
    "exams",
]
