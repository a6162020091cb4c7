"""Admin API key authentication and management."""
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from hospital_cms.api.database_models import AdminAPIKey, Base


class InvalidAPIKeyError(Exception):
    """Raised when API key is invalid or inactive."""
    pass


class APIKeyManager:
    """
    Manages admin API key generation, validation, and lifecycle.

    Keys are looked up by their 16-char prefix, then verified with bcrypt.
    The plain key is only ever returned once, from generate_api_key().
    """

    def __init__(self, database_url: str):
        """Initialize with database connection."""
        self.engine = create_engine(database_url, pool_pre_ping=True)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine)

    def generate_api_key(self, label: Optional[str] = None) -> str:
        """
        Generate a new admin API key.

        Args:
            label: Optional description (who/what the key is for)

        Returns:
            API key in format: ak_<hex>
        """
        api_key = f"ak_{uuid.uuid4().hex}"

        with self.SessionLocal() as db:
            db.add(AdminAPIKey(
                key_prefix=AdminAPIKey.get_key_prefix(api_key),
                key_hash=AdminAPIKey.hash_key(api_key),
                label=label,
                created_at=datetime.now(timezone.utc),
                last_used=datetime.now(timezone.utc),
                is_active=True,
            ))
            db.commit()

        return api_key

    def _find(self, db, api_key: str) -> Optional[AdminAPIKey]:
        db_key = db.query(AdminAPIKey).filter(
            AdminAPIKey.key_prefix == AdminAPIKey.get_key_prefix(api_key)
        ).first()

        if not db_key or not AdminAPIKey.verify_key(api_key, db_key.key_hash):
            return None
        return db_key

    def validate_api_key(self, api_key: str) -> str:
        """
        Validate API key and return its prefix (safe to log).

        Updates last_used on success.

        Raises:
            InvalidAPIKeyError: If key is invalid or inactive
        """
        with self.SessionLocal() as db:
            db_key = self._find(db, api_key)
            if db_key is None or not db_key.is_active:
                raise InvalidAPIKeyError("Invalid or inactive API key")

            db_key.last_used = datetime.now(timezone.utc)
            db.commit()
            return db_key.key_prefix

    def deactivate_api_key(self, api_key: str):
        """
        Deactivate API key (soft delete).

        Raises:
            InvalidAPIKeyError: If key not found
        """
        with self.SessionLocal() as db:
            db_key = self._find(db, api_key)
            if db_key is None:
                raise InvalidAPIKeyError("API key not found")

            db_key.is_active = False
            db.commit()

    def deactivate_prefix(self, key_prefix: str) -> bool:
        """Deactivate by the prefix shown in list_keys(); False if unknown."""
        with self.SessionLocal() as db:
            db_key = db.query(AdminAPIKey).filter(AdminAPIKey.key_prefix == key_prefix).first()
            if db_key is None:
                return False
            db_key.is_active = False
            db.commit()
            return True

    def list_keys(self) -> List[Dict]:
        """Key metadata (never the key or its hash)."""
        with self.SessionLocal() as db:
            return [
                {
                    "prefix": key.key_prefix,
                    "label": key.label,
                    "active": key.is_active,
                    "created_at": key.created_at,
                    "last_used": key.last_used,
                }
                for key in db.query(AdminAPIKey).order_by(AdminAPIKey.created_at).all()
            ]
