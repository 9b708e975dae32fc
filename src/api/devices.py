"""Device registration endpoints for push notifications."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.api.dependencies import CurrentUser
from src.database import get_db
from src.models.user_device import UserDevice
from src.schemas.device import DeviceRegister, DeviceResponse

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("/register-device", response_model=DeviceResponse)
async def register_device(
    device: DeviceRegister,
    db: Annotated[Session, Depends(get_db)],
    current_user: CurrentUser,
) -> UserDevice:
    """Register a device token to receive recipe-ready notifications."""
    existing = (
        db.query(UserDevice)
        .filter(
            UserDevice.user_id == current_user.id,
            UserDevice.device_token == device.device_token,
        )
        .first()
    )

    if existing:
        existing.platform = device.platform.value
        db.commit()
        db.refresh(existing)
        return existing

    user_device = UserDevice(
        user_id=current_user.id,
        device_token=device.device_token,
        platform=device.platform.value,
    )
    db.add(user_device)
    db.commit()
    db.refresh(user_device)

    return user_device
