"""Storage ports and their SQLAlchemy backends."""

from .abstract_storage import (
    AbstractPostStore,
    AbstractResetTokenStore,
    AbstractUserStore,
)
from .sql_storage import SQLPostStore, SQLResetTokenStore, SQLUserStore

__all__ = [
    "AbstractPostStore",
    "AbstractResetTokenStore",
    "AbstractUserStore",
    "SQLPostStore",
    "SQLResetTokenStore",
    "SQLUserStore",
]
