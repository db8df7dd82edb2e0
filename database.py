from datetime import datetime, timezone

from sqlalchemy import create_engine, Column, String, Text, DateTime
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from config import Config


def make_engine(url: str):
    """Create an engine; in-memory SQLite shares one connection so data survives."""
    if not url.startswith("sqlite"):
        return create_engine(url)
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(url, connect_args={"check_same_thread": False})


# Database Setup
engine = make_engine(Config.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# --- Models ---

class KeyValue(Base):
    __tablename__ = "kv_store"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)  # JSON document
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

# --- Init DB ---
def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)
