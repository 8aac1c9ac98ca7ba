"""
Per-user key/value settings.

Values keep their JSON type across the round trip: each row stores the
serialized text plus a `value_type` tag (string, number, boolean, json).
"""
import json
import logging
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.preferences import UserPreference

logger = logging.getLogger(__name__)

THEME_KEY = "theme"
THEMES = ("light", "dark", "auto")


@dataclass(frozen=True)
class PreferenceValue:
    kind: str
    raw: str

    @classmethod
    def from_python(cls, value: Any) -> "PreferenceValue":
        """Raises ValueError for NaN/Infinity, top-level or nested."""
        # bool first: it is a subclass of int
        if isinstance(value, bool):
            return cls("boolean", "true" if value else "false")
        if isinstance(value, (int, float)):
            return cls("number", json.dumps(value, allow_nan=False))
        if isinstance(value, str):
            return cls("string", value)
        if isinstance(value, (dict, list)):
            return cls("json", json.dumps(value, separators=(",", ":"), allow_nan=False))
        raise TypeError(f"Unsupported preference value type: {type(value).__name__}")

    @classmethod
    def from_row(cls, pref: UserPreference) -> "PreferenceValue":
        return cls(pref.value_type or "string", pref.value)

    def to_python(self) -> Any:
        if self.raw is None:
            return None
        if self.kind == "boolean":
            return self.raw == "true"
        if self.kind in ("number", "json"):
            return json.loads(self.raw)
        return self.raw


async def _get_row(db: AsyncSession, user_id: int, key: str) -> UserPreference | None:
    result = await db.execute(
        select(UserPreference).filter(UserPreference.user_id == user_id, UserPreference.key == key)
    )
    return result.scalars().first()


async def get_value(db: AsyncSession, user_id: int, key: str, default: Any = None) -> Any:
    pref = await _get_row(db, user_id, key)
    if pref is None:
        return default
    return PreferenceValue.from_row(pref).to_python()


async def get_all(db: AsyncSession, user_id: int) -> dict[str, Any]:
    result = await db.execute(
        select(UserPreference).filter(UserPreference.user_id == user_id).order_by(UserPreference.key)
    )
    return {
        pref.key: PreferenceValue.from_row(pref).to_python()
        for pref in result.scalars().all()
    }


async def set_value(db: AsyncSession, user_id: int, key: str, value: Any) -> None:
    """Upsert on (user_id, key); setting the same value twice is a no-op."""
    encoded = PreferenceValue.from_python(value)
    pref = await _get_row(db, user_id, key)
    if pref is None:
        pref = UserPreference(user_id=user_id, key=key)
        db.add(pref)
    pref.value = encoded.raw
    pref.value_type = encoded.kind
    # Later lookups in the same batch must see this row
    await db.flush()


async def set_many(db: AsyncSession, user_id: int, items: list[tuple[str, Any]]) -> None:
    """
    Apply a batch of upserts in the caller's transaction.

    Nothing is committed here: the caller commits once, or rolls back the
    whole batch when any item fails.
    """
    for key, value in items:
        await set_value(db, user_id, key, value)
    logger.debug("User %s stored %s preference(s)", user_id, len(items))


async def delete_value(db: AsyncSession, user_id: int, key: str) -> None:
    result = await db.execute(
        delete(UserPreference).where(UserPreference.user_id == user_id, UserPreference.key == key)
    )
    if not result.rowcount:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preference not found")


def validate_theme(value: Any) -> str:
    if value not in THEMES:
        raise ValueError("Theme must be light, dark, or auto")
    return value
