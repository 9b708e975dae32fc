"""Registered device model for push notifications."""

from sqlalchemy import Column, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin, UserOwnedMixin


class UserDevice(Base, TimestampMixin, UserOwnedMixin):
    """A device token that should be told when a recipe is ready."""

    __tablename__ = "user_devices"
    __table_args__ = (UniqueConstraint("user_id", "device_token", name="uq_user_device_token"),)

    id = Column(Integer, primary_key=True, index=True)
    device_token = Column(String(255), nullable=False)
    platform = Column(String(20), nullable=False)  # "ios" | "android"

    # Relationships
    user = relationship("User", backref="devices")
