"""Runtime settings endpoints (AI provider selection and credentials)."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationError
from app.db import repository
from app.db.session import get_db
from app.providers.factory import PROVIDER_NAMES, SETTING_KEYS
from app.schemas.api import SettingUpdate, SettingValue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])

MASK = "********"


def _check_key(key: str) -> str:
    if key not in SETTING_KEYS:
        raise ValidationError(f"Unknown setting: {key}")
    return key


def _masked(key: str, value: Optional[str]) -> Optional[str]:
    if value and key.endswith("_api_key"):
        return MASK
    return value


@router.get("/{key}", response_model=SettingValue)
async def get_setting(key: str, db: AsyncSession = Depends(get_db)):
    value = await db.run_sync(repository.get_setting, _check_key(key))
    return SettingValue(key=key, value=_masked(key, value))


@router.put("/{key}", response_model=SettingValue)
async def put_setting(key: str, payload: SettingUpdate, db: AsyncSession = Depends(get_db)):
    _check_key(key)
    value = payload.value.strip()
    if key == "ai_provider":
        value = value.lower()
        if value not in PROVIDER_NAMES:
            raise ValidationError(f"Unknown AI provider: {payload.value}")

    await db.run_sync(repository.set_setting, key, value)
    await db.commit()
    logger.info("Setting %s updated", key)
    return SettingValue(key=key, value=_masked(key, value))
