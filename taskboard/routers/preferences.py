import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from taskboard.dependencies import get_db, get_actor_id
from taskboard.errors import validation_error
from taskboard.schemas.common import ApiResponse, MessageResponse
from taskboard.schemas.preference import PreferenceEntry, PreferencesStore, PreferenceUpdate
from taskboard.services import preferences as preference_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user/preferences", tags=["preferences"])


@router.get("", response_model=ApiResponse[dict])
async def list_preferences(db: AsyncSession = Depends(get_db), actor_id: int = Depends(get_actor_id)):
    return {"data": await preference_service.get_all(db, actor_id)}


@router.get("/{key}")
async def get_preference(key: str, db: AsyncSession = Depends(get_db), actor_id: int = Depends(get_actor_id)):
    value = await preference_service.get_value(db, actor_id, key)
    if key == preference_service.THEME_KEY:
        return {"theme": value}
    return {"success": True, "data": PreferenceEntry(key=key, value=value).model_dump()}


@router.post("", response_model=MessageResponse)
async def store_preferences(
    data: PreferencesStore,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    if data.preferences is not None:
        items = [(item.key, item.value) for item in data.preferences]
    else:
        missing = {}
        if data.key is None:
            missing["key"] = "The key field is required when preferences is not present."
        if data.value is None:
            missing["value"] = "The value field is required when preferences is not present."
        if missing:
            raise validation_error(missing)
        items = [(data.key, data.value)]

    # The batch lands together or not at all
    try:
        await preference_service.set_many(db, actor_id, items)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.warning("Preference batch for user %s rolled back: %s", actor_id, e)
        raise validation_error({"preferences": f"Failed to update preferences: {e}"})

    return {"message": "Preferences updated successfully"}


@router.put("/{key}")
async def update_preference(
    key: str,
    data: PreferenceUpdate,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    if key == preference_service.THEME_KEY:
        value = data.theme if data.theme is not None else data.value
        if value is None:
            value = "light"
        try:
            value = preference_service.validate_theme(value)
        except ValueError as e:
            raise validation_error({"theme": str(e)})
    else:
        if data.value is None:
            raise validation_error({"value": "The value field is required."})
        value = data.value

    try:
        await preference_service.set_value(db, actor_id, key, value)
    except ValueError as e:
        raise validation_error({"value": str(e)})
    await db.commit()

    if key == preference_service.THEME_KEY:
        return {"theme": value}
    return {
        "success": True,
        "message": "Preference updated successfully",
        "data": PreferenceEntry(key=key, value=value).model_dump(),
    }


@router.delete("/{key}", response_model=MessageResponse)
async def delete_preference(key: str, db: AsyncSession = Depends(get_db), actor_id: int = Depends(get_actor_id)):
    await preference_service.delete_value(db, actor_id, key)
    await db.commit()
    return {"message": "Preference deleted successfully"}
