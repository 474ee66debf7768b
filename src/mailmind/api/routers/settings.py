"""Storage settings endpoints."""

import json
import logging

from fastapi import APIRouter, Depends

from ...config.settings import get_settings
from ...exceptions import InvalidRequestError
from ...storage.repository import EmailStore
from ..dependencies import get_store
from ..schemas import StorageSettingsRequest, StorageSettingsResponse, StorageSettingsSaved

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])

STORAGE_CONFIG_KEY = "storage_config"
STORAGE_MODES = ("local", "postgresql")


@router.get("/storage", response_model=StorageSettingsResponse)
def get_storage_settings(store: EmailStore = Depends(get_store)):
    """Current storage mode and the saved one, which applies after a restart."""
    settings = get_settings()
    saved = {"mode": settings.storage_mode, "dataDir": settings.data_dir}

    raw = store.get_setting(STORAGE_CONFIG_KEY)
    if raw:
        try:
            saved.update(json.loads(raw))
        except json.JSONDecodeError:
            logger.warning(f"Ignoring invalid {STORAGE_CONFIG_KEY} setting: {raw!r}")

    if settings.storage_mode == "local":
        info = f"Using local storage ({settings.data_dir})"
    else:
        info = "Using PostgreSQL database"

    return StorageSettingsResponse(
        mode=settings.storage_mode,
        data_dir=settings.data_dir,
        saved_mode=saved["mode"],
        saved_data_dir=saved["dataDir"] or "",
        info=info,
        needs_restart=(
            saved["mode"] != settings.storage_mode or (saved["dataDir"] or "") != settings.data_dir
        ),
    )


@router.post("/storage", response_model=StorageSettingsSaved)
def save_storage_settings(
    request: StorageSettingsRequest,
    store: EmailStore = Depends(get_store),
):
    if request.mode not in STORAGE_MODES:
        raise InvalidRequestError("Invalid storage mode.")
    if request.mode == "local" and not request.data_dir:
        raise InvalidRequestError("Local mode requires a data folder path.")

    data_dir = request.data_dir or ""
    store.set_setting(STORAGE_CONFIG_KEY, json.dumps({"mode": request.mode, "dataDir": data_dir}))
    logger.info(f"Saved storage settings: {request.mode} {data_dir}")

    return StorageSettingsSaved(
        message="Settings saved. Restart the application to apply the changes.",
        saved_mode=request.mode,
        saved_data_dir=data_dir,
    )
