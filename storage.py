"""
Entity store for the earnings dashboard.

Four JSON documents live in a key-value backend: the profile, the earnings
list, the settings and the achievement flags. Backends are either an
in-memory dict (tests, embedding) or the ``kv_store`` SQL table.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.orm import sessionmaker

from config import Config
from database import KeyValue, SessionLocal, init_db, make_engine
from models import Achievements, Profile, Settings

logger = logging.getLogger(__name__)

PROFILE = "profile"
EARNINGS = "earnings"
SETTINGS = "settings"
ACHIEVEMENTS = "achievements"
ENTITY_KEYS = (PROFILE, EARNINGS, SETTINGS, ACHIEVEMENTS)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class KeyValueBackend(Protocol):
    """Durable synchronous string map."""

    def get(self, key: str) -> Optional[str]:  # pragma: no cover - interface
        ...

    def set(self, key: str, value: str) -> None:  # pragma: no cover - interface
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - interface
        ...


class MemoryBackend:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class SQLBackend:
    """Key-value slots stored as rows of the ``kv_store`` table."""

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self.session_factory() as db:
            row = db.get(KeyValue, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self.session_factory() as db:
            db.merge(KeyValue(key=key, value=value, updated_at=datetime.now(timezone.utc)))
            db.commit()

    def delete(self, key: str) -> None:
        with self.session_factory() as db:
            row = db.get(KeyValue, key)
            if row is not None:
                db.delete(row)
                db.commit()


class EntityStore:
    """Typed get/set/update access to the four dashboard entities."""

    def __init__(self, backend: Optional[KeyValueBackend] = None, prefix: str = Config.STORAGE_PREFIX):
        self.backend = backend if backend is not None else MemoryBackend()
        self.prefix = prefix

    def key(self, entity: str) -> str:
        return f"{self.prefix}{entity}"

    def _read(self, entity: str) -> Any:
        raw = self.backend.get(self.key(entity))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring corrupt %s record: %s", entity, exc)
            return None

    def _read_object(self, entity: str) -> Optional[Dict[str, Any]]:
        value = self._read(entity)
        if value is None or isinstance(value, dict):
            return value
        logger.warning("Ignoring %s record that is not an object", entity)
        return None

    def _write(self, entity: str, value: Any) -> None:
        self.backend.set(self.key(entity), json.dumps(value, default=str))

    def _merge(self, entity: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        current = self._read(entity)
        base = current if isinstance(current, dict) else {}
        updated = {**base, **updates}
        self._write(entity, updated)
        return updated

    def init(self) -> None:
        """Seed defaults for every entity that is not stored yet."""
        if self.get_profile() is None:
            profile = Profile(currency=Config.DEFAULT_CURRENCY, created_at=now_iso())
            self.save_profile(profile.model_dump(by_alias=True))
        if self.get_earnings() is None:
            self.save_earnings([])
        if self.get_settings() is None:
            self.save_settings(Settings().model_dump(by_alias=True))
        if self.get_achievements() is None:
            self.save_achievements(Achievements().model_dump(by_alias=True))

    # --- Profile ---

    def get_profile(self) -> Optional[Dict[str, Any]]:
        return self._read_object(PROFILE)

    def save_profile(self, profile: Dict[str, Any]) -> None:
        self._write(PROFILE, profile)

    def update_profile(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self._merge(PROFILE, updates)

    def currency(self) -> str:
        """Profile currency symbol, falling back to the configured default."""
        return (self.get_profile() or {}).get("currency") or Config.DEFAULT_CURRENCY

    # --- Earnings ---

    def get_earnings(self) -> Optional[List[Dict[str, Any]]]:
        earnings = self._read(EARNINGS)
        return earnings if isinstance(earnings, list) or earnings is None else None

    def save_earnings(self, earnings: List[Dict[str, Any]]) -> None:
        self._write(EARNINGS, earnings)

    # --- Settings ---

    def get_settings(self) -> Optional[Dict[str, Any]]:
        return self._read_object(SETTINGS)

    def save_settings(self, settings: Dict[str, Any]) -> None:
        self._write(SETTINGS, settings)

    def update_settings(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self._merge(SETTINGS, updates)

    # --- Achievements ---

    def get_achievements(self) -> Optional[Dict[str, bool]]:
        return self._read_object(ACHIEVEMENTS)

    def save_achievements(self, achievements: Dict[str, bool]) -> None:
        self._write(ACHIEVEMENTS, achievements)

    def unlock_achievement(self, achievement_id: str) -> bool:
        """Flip one flag to unlocked; True only when it was locked before."""
        achievements = self.get_achievements()
        if not isinstance(achievements, dict):
            achievements = Achievements().model_dump(by_alias=True)
        if achievements.get(achievement_id):
            return False
        achievements[achievement_id] = True
        self.save_achievements(achievements)
        return True

    # --- Bulk ---

    def clear_all(self) -> None:
        for entity in ENTITY_KEYS:
            self.backend.delete(self.key(entity))

    def export_data(self) -> Dict[str, Any]:
        return {
            "profile": self.get_profile(),
            "earnings": self.get_earnings(),
            "settings": self.get_settings(),
            "achievements": self.get_achievements(),
            "exportedAt": now_iso(),
        }

    def import_data(self, data: Dict[str, Any]) -> None:
        imported = [entity for entity in ENTITY_KEYS if data.get(entity) is not None]
        for entity in imported:
            self._write(entity, data[entity])
        logger.info("Imported %s", ", ".join(imported) or "nothing")


def open_store(database_url: Optional[str] = None, prefix: str = Config.STORAGE_PREFIX) -> EntityStore:
    """
    Open a SQL-backed store, creating the table and default records if needed.
    """
    if database_url:
        bind = make_engine(database_url)
        session_factory = sessionmaker(autocommit=False, autoflush=False, bind=bind)
    else:
        bind = None
        session_factory = SessionLocal
    init_db(bind)
    store = EntityStore(SQLBackend(session_factory), prefix=prefix)
    store.init()
    return store
