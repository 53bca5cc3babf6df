"""Database configuration and session management."""

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from finance_dashboard.config import settings

# Create engine with SQLite
engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args={"check_same_thread": False},
)


def init_db(bind: Engine = engine) -> None:
    """Initialize database tables."""
    # Import models to register them with SQLModel
    from finance_dashboard.models import Transaction  # noqa: F401
    SQLModel.metadata.create_all(bind)


def get_session(bind: Engine = engine) -> Session:
    """Get a new database session."""
    return Session(bind)
