"""Push notification service for Apple devices (APNs)."""

import logging
import time
from dataclasses import dataclass
from enum import Enum

import httpx
from jose import jwt
from jose.exceptions import JOSEError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models import UserDevice
from src.models.enums import DevicePlatform

logger = logging.getLogger(__name__)

APNS_PRODUCTION_HOST = "https://api.push.apple.com"
APNS_SANDBOX_HOST = "https://api.sandbox.push.apple.com"

# Apple rejects provider tokens older than an hour
PROVIDER_TOKEN_TTL_SECONDS = 50 * 60


@dataclass
class PushPayload:
    """What a device is told when something happened."""

    title: str
    body: str
    recipe_id: int | None = None

    def to_apns(self) -> dict:
        payload: dict = {
            "aps": {
                "alert": {"title": self.title, "body": self.body},
                "sound": "default",
            }
        }
        if self.recipe_id is not None:
            payload["recipeId"] = str(self.recipe_id)
        return payload


class DeliveryResult(str, Enum):
    """Outcome of one push attempt."""

    SENT = "sent"
    FAILED = "failed"
    UNREGISTERED = "unregistered"


class PushNotificationService:
    """Fire-and-forget push notifications; failures are logged, never raised."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self._provider_token: str | None = None
        self._provider_token_issued_at = 0
        self._configured = bool(
            self.settings.apns_key and self.settings.apns_key_id and self.settings.apple_team_id
        )
        if not self._configured:
            logger.info("APNs credentials not configured, push disabled")

    @property
    def is_configured(self) -> bool:
        """Check if APNs credentials are available."""
        return self._configured

    @property
    def host(self) -> str:
        return APNS_SANDBOX_HOST if self.settings.apns_use_sandbox else APNS_PRODUCTION_HOST

    def _get_provider_token(self) -> str:
        """Signed ES256 provider token, reused until it is close to expiry."""
        now = int(time.time())
        if self._provider_token and now - self._provider_token_issued_at < PROVIDER_TOKEN_TTL_SECONDS:
            return self._provider_token

        # Keys pasted into env files often carry literal "\n"
        key = self.settings.apns_key.strip().replace("\\n", "\n")
        self._provider_token = jwt.encode(
            {"iss": self.settings.apple_team_id.strip(), "iat": now},
            key,
            algorithm="ES256",
            headers={"kid": self.settings.apns_key_id.strip()},
        )
        self._provider_token_issued_at = now
        return self._provider_token

    def notify(self, device_token: str, payload: PushPayload) -> DeliveryResult:
        """Send one alert to one device."""
        if not self._configured:
            logger.warning("Push notifications not available")
            return DeliveryResult.FAILED

        try:
            headers = {
                "authorization": f"bearer {self._get_provider_token()}",
                "apns-topic": self.settings.apns_bundle_id,
                "apns-push-type": "alert",
                "apns-priority": "10",
            }
            with httpx.Client(http2=True, timeout=10.0) as client:
                response = client.post(
                    f"{self.host}/3/device/{device_token}",
                    json=payload.to_apns(),
                    headers=headers,
                )
        except (httpx.HTTPError, JOSEError) as e:
            logger.error(f"Push failed for device {device_token[:8]}...: {e}")
            return DeliveryResult.FAILED

        if response.status_code == 200:
            return DeliveryResult.SENT
        if response.status_code == 410:
            return DeliveryResult.UNREGISTERED
        logger.error(
            f"APNs rejected push for device {device_token[:8]}...: "
            f"{response.status_code} {response.text}"
        )
        return DeliveryResult.FAILED

    def notify_user(
        self,
        db: Session,
        user_id: int,
        title: str,
        body: str,
        recipe_id: int | None = None,
    ) -> int:
        """
        Send a push notification to every iOS device registered by a user.

        Returns the number of devices that accepted the notification.
        """
        devices = (
            db.query(UserDevice)
            .filter(
                UserDevice.user_id == user_id,
                UserDevice.platform == DevicePlatform.IOS.value,
            )
            .all()
        )

        if not devices:
            logger.info(f"No registered devices for user {user_id}")
            return 0

        payload = PushPayload(title=title, body=body, recipe_id=recipe_id)
        success_count = 0
        for device in devices:
            result = self.notify(device.device_token, payload)
            if result is DeliveryResult.SENT:
                success_count += 1
            elif result is DeliveryResult.UNREGISTERED:
                logger.info(f"Removing unregistered device {device.id}")
                db.delete(device)
                db.commit()

        logger.info(f"Sent push to {success_count}/{len(devices)} devices for user {user_id}")
        return success_count


def get_notification_service() -> PushNotificationService:
    """Get a push notification service instance."""
    return PushNotificationService()
