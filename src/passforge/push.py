"""Token-authenticated push notifications through APNs."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

import httpx
import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from passforge.errors import AuthKeyError, DeliveryError, PushConfigError
from passforge.models import PushConfig, PushResult

logger = logging.getLogger(__name__)

PRODUCTION_ENDPOINT = "https://api.push.apple.com/3/device"
SANDBOX_ENDPOINT = "https://api.development.push.apple.com/3/device"


def load_auth_key(path: str | Path) -> ec.EllipticCurvePrivateKey:
    """Load the ``.p8`` provider key used to sign push tokens.

    Raises:
        PushConfigError: if the file does not exist.
        AuthKeyError: if it is not a readable P-256 private key.
    """
    key_path = Path(path)
    if not key_path.is_file():
        raise PushConfigError(f"Auth key file not found at: {key_path}")
    try:
        key = serialization.load_pem_private_key(key_path.read_bytes(), password=None)
    except (OSError, TypeError, ValueError) as exc:
        raise AuthKeyError(f"Invalid auth key provided: {exc}") from exc
    if not isinstance(key, ec.EllipticCurvePrivateKey) or not isinstance(
        key.curve, ec.SECP256R1
    ):
        raise AuthKeyError("Invalid auth key provided: expected an ES256 (P-256) key.")
    return key


def make_provider_token(
    key: ec.EllipticCurvePrivateKey, key_id: str, team_id: str, issued_at: int | None = None
) -> str:
    """Return an ES256 JWT identifying *team_id* to the notification service."""
    claims = {"iss": team_id, "iat": int(time.time()) if issued_at is None else issued_at}
    try:
        return jwt.encode(claims, key, algorithm="ES256", headers={"kid": key_id})
    except (jwt.PyJWTError, ValueError) as exc:
        raise AuthKeyError(f"Unable to sign JWT with provided key: {exc}") from exc


class PushNotifier:
    """Send alert notifications for a configured app or pass type.

    Args:
        config: Topic and provider key credentials.
        client: Optional :class:`httpx.Client`; an HTTP/2 client is created per
            call when omitted.
    """

    def __init__(self, config: PushConfig, client: httpx.Client | None = None) -> None:
        self._config = config
        self._client = client

    @property
    def endpoint(self) -> str:
        return PRODUCTION_ENDPOINT if self._config.production else SANDBOX_ENDPOINT

    def push(self, device_token: str, title: str, body: str) -> PushResult:
        """Send one notification to *device_token*.

        Raises:
            PushConfigError: if the configuration is incomplete.
            AuthKeyError: if the auth key cannot be used.
            DeliveryError: on transport failure or any status other than 200.
        """
        config = self._config
        if not config.is_complete():
            raise PushConfigError("Push configuration is incomplete.")

        key = load_auth_key(config.auth_key_path)
        token = make_provider_token(key, config.key_id, config.team_id)
        notification = {
            "aps": {
                "alert": {"title": title, "body": body},
                "sound": "default",
            },
        }
        headers = {
            "content-type": "application/json",
            "authorization": f"bearer {token}",
            "apns-topic": config.bundle_id,
        }
        url = f"{self.endpoint}/{device_token}"

        try:
            if self._client is not None:
                response = self._client.post(url, content=json.dumps(notification), headers=headers)
            else:
                with httpx.Client(http2=True, timeout=30.0) as client:
                    response = client.post(url, content=json.dumps(notification), headers=headers)
        except httpx.HTTPError as exc:
            raise DeliveryError(f"Push request failed: {exc}") from exc

        if response.status_code != 200:
            raise DeliveryError(f"APNs returned HTTP {response.status_code}: {response.text}")
        logger.info("Push delivered to %s", device_token[:8])
        return PushResult(status=response.status_code, response=response.text)


__all__ = [
    "PRODUCTION_ENDPOINT",
    "SANDBOX_ENDPOINT",
    "PushNotifier",
    "load_auth_key",
    "make_provider_token",
]
