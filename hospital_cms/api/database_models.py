"""SQLAlchemy models for admin API keys."""
from datetime import datetime, timezone

import bcrypt
from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

KEY_PREFIX_LENGTH = 16


def utc_now():
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


class AdminAPIKey(Base):
    """Admin API key, stored as a bcrypt hash plus a lookup prefix."""
    __tablename__ = "admin_api_keys"

    key_prefix = Column(String(20), primary_key=True, index=True)  # "ak_" + first 13 hex chars
    key_hash = Column(String(255), nullable=False)
    label = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    last_used = Column(DateTime, default=utc_now, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    @staticmethod
    def hash_key(api_key: str) -> str:
        """Hash API key using bcrypt."""
        return bcrypt.hashpw(api_key.encode(), bcrypt.gensalt()).decode()

    @staticmethod
    def verify_key(api_key: str, key_hash: str) -> bool:
        """Verify API key against hash."""
        return bcrypt.checkpw(api_key.encode(), key_hash.encode())

    @staticmethod
    def get_key_prefix(api_key: str) -> str:
        """Get first 16 chars for indexing."""
        return api_key[:KEY_PREFIX_LENGTH]

    def __repr__(self):
        return f"<AdminAPIKey(prefix={self.key_prefix}, label={self.label}, active={self.is_active})>"
