"""Tests for APNs push notifications."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from src.models import UserDevice
from src.services.notification_service import (
    DeliveryResult,
    PushNotificationService,
    PushPayload,
)


@pytest.fixture
def push_service():
    """Service with credentials set and provider token signing stubbed."""
    service = PushNotificationService()
    service._configured = True
    service.settings = service.settings.model_copy(
        update={"apns_key_id": "KEY123", "apple_team_id": "TEAM123"}
    )
    service._get_provider_token = MagicMock(return_value="provider-token")
    return service


def mock_http_client(status_code: int = 200, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.__enter__.return_value = client
    if error is not None:
        client.post.side_effect = error
    else:
        client.post.return_value = httpx.Response(status_code, text="")
    return client


def add_device(db, user, token: str, platform: str = "ios") -> UserDevice:
    device = UserDevice(user_id=user.id, device_token=token, platform=platform)
    db.add(device)
    db.commit()
    db.refresh(device)
    return device


class TestPushPayload:
    """Tests for payload construction."""

    def test_payload_with_recipe(self):
        payload = PushPayload(title="Recipe Ready! 🍳", body='"Tacos" is ready to cook.', recipe_id=7)
        assert payload.to_apns() == {
            "aps": {
                "alert": {"title": "Recipe Ready! 🍳", "body": '"Tacos" is ready to cook.'},
                "sound": "default",
            },
            "recipeId": "7",
        }

    def test_payload_without_recipe(self):
        assert "recipeId" not in PushPayload(title="t", body="b").to_apns()


class TestNotify:
    """Tests for single-device delivery."""

    def test_not_configured(self):
        service = PushNotificationService()
        service._configured = False
        assert service.notify("token", PushPayload(title="t", body="b")) is DeliveryResult.FAILED

    def test_sent(self, push_service):
        client = mock_http_client(200)
        with patch("src.services.notification_service.httpx.Client", return_value=client):
            result = push_service.notify("devicetoken123", PushPayload(title="t", body="b"))

        assert result is DeliveryResult.SENT
        url = client.post.call_args.args[0]
        headers = client.post.call_args.kwargs["headers"]
        assert url.endswith("/3/device/devicetoken123")
        assert headers["authorization"] == "bearer provider-token"
        assert headers["apns-topic"] == push_service.settings.apns_bundle_id

    def test_unregistered(self, push_service):
        client = mock_http_client(410)
        with patch("src.services.notification_service.httpx.Client", return_value=client):
            result = push_service.notify("devicetoken123", PushPayload(title="t", body="b"))
        assert result is DeliveryResult.UNREGISTERED

    def test_transport_error_never_raises(self, push_service):
        request = httpx.Request("POST", "https://api.sandbox.push.apple.com")
        client = mock_http_client(error=httpx.ConnectError("offline", request=request))
        with patch("src.services.notification_service.httpx.Client", return_value=client):
            result = push_service.notify("devicetoken123", PushPayload(title="t", body="b"))
        assert result is DeliveryResult.FAILED

    def test_unusable_signing_key_never_raises(self):
        service = PushNotificationService()
        service._configured = True
        service.settings = service.settings.model_copy(
            update={
                "apns_key": "not-a-pem-key",
                "apns_key_id": "KEY123",
                "apple_team_id": "TEAM123",
            }
        )
        client = mock_http_client(200)

        with patch("src.services.notification_service.httpx.Client", return_value=client):
            result = service.notify("devicetoken123", PushPayload(title="t", body="b"))

        assert result is DeliveryResult.FAILED
        client.post.assert_not_called()


class TestNotifyUser:
    """Tests for fan-out to a user's devices."""

    def test_only_ios_devices(self, db, user, push_service):
        add_device(db, user, "ios-token")
        add_device(db, user, "android-token", platform="android")
        client = mock_http_client(200)

        with patch("src.services.notification_service.httpx.Client", return_value=client):
            sent = push_service.notify_user(db, user.id, "Recipe Ready! 🍳", "body", recipe_id=1)

        assert sent == 1
        assert client.post.call_count == 1
        assert client.post.call_args.args[0].endswith("/ios-token")

    def test_no_devices(self, db, user, push_service):
        assert push_service.notify_user(db, user.id, "t", "b") == 0

    def test_unregistered_device_removed(self, db, user, push_service):
        add_device(db, user, "stale-token")
        client = mock_http_client(410)

        with patch("src.services.notification_service.httpx.Client", return_value=client):
            sent = push_service.notify_user(db, user.id, "t", "b")

        assert sent == 0
        assert db.query(UserDevice).filter(UserDevice.user_id == user.id).count() == 0
