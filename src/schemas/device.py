"""Device registration schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import DevicePlatform


class DeviceRegister(BaseModel):
    """Schema for registering a device for push notifications."""

    model_config = ConfigDict(populate_by_name=True)

    device_token: str = Field(..., min_length=1, max_length=255, alias="deviceToken")
    platform: DevicePlatform


class DeviceResponse(BaseModel):
    """Schema for registered device response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    device_token: str
    platform: str
    updated_at: datetime
