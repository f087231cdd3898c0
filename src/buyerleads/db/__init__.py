"""
Database Package

Database models, connection management, and data persistence layer.
"""
from src.buyerleads.db.base import Base
from src.buyerleads.db.session import (
    engine,
    SessionLocal,
    get_db_session,
    transaction,
    health_check,
    close_connections,
    create_all_tables,
    drop_all_tables,
)
from src.buyerleads.db.models import (
    User,
    Buyer,
    BuyerHistory,
)
from src.buyerleads.db.repository import (
    BaseRepository,
    UserRepository,
    BuyerRepository,
    BuyerHistoryRepository,
)

__all__ = [
    # Base
    "Base",
    # Session management
    "engine",
    "SessionLocal",
    "get_db_session",
    "transaction",
    "health_check",
    "close_connections",
    "create_all_tables",
    "drop_all_tables",
    # Models
    "User",
    "Buyer",
    "BuyerHistory",
    # Repositories
    "BaseRepository",
    "UserRepository",
    "BuyerRepository",
    "BuyerHistoryRepository",
]
