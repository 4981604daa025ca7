"""
FastAPI dependencies.

The admin API has no authentication of its own; it is expected to sit behind
the operator's network boundary.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from examdesk.config import Settings, get_settings
from examdesk.db.session import get_db

# Type aliases for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]
