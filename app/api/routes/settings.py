from fastapi import APIRouter, Depends

from app.api.dependencies import require_capability, require_db
from app.core.policy import Capability
from app.cqrs.commands import settings as settings_commands
from app.models.schemas import (
    OperationResult,
    SettingsOut,
    WhatsAppSettingsUpdate,
    WhatsAppTestRequest,
)

router = APIRouter(
    prefix="/settings",
    tags=["settings"],
    dependencies=[Depends(require_capability(Capability.SETTINGS_MANAGE))],
)


@router.get("", response_model=SettingsOut)
def get_settings():
    require_db()
    return settings_commands.get_or_create_settings()


@router.put("/whatsapp", response_model=SettingsOut)
def update_whatsapp(payload: WhatsAppSettingsUpdate):
    require_db()
    return settings_commands.update_whatsapp_settings(payload)


@router.post("/whatsapp/test", response_model=OperationResult)
def test_whatsapp(payload: WhatsAppTestRequest):
    require_db()
    return settings_commands.send_test_message(payload.phone_number)
