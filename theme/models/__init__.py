"""Database models."""
from theme.models.base import Base, init_db
from theme.models.option import Option  # noqa: F401 - for metadata
from theme.models.user import User  # noqa: F401 - for metadata

__all__ = [
    "Base",
    "Option",
    "User",
    "init_db",
]
