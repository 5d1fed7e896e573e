"""
bKash tokenized checkout API client.

The id_token is cached in memory and renewed 60 seconds before bKash expires it,
preferring the refresh grant over a full grant.
"""
import logging
import time
from typing import Callable, Optional

import httpx

from crosscareers.core import config
from crosscareers.core.errors import BadGateway
from crosscareers.core.logging_config import sanitize_log_data

logger = logging.getLogger(__name__)

TOKEN_EXPIRY_MARGIN_SECONDS = 60


class BkashClient:
    def __init__(
        self,
        base_url: str = config.BKASH_BASE_URL,
        username: Optional[str] = config.BKASH_USERNAME,
        password: Optional[str] = config.BKASH_PASSWORD,
        app_key: Optional[str] = config.BKASH_APP_KEY,
        app_secret: Optional[str] = config.BKASH_APP_SECRET,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
        clock: Callable[[], float] = time.time,
    ):
        self.username = username
        self.password = password
        self.app_key = app_key
        self.app_secret = app_secret
        self.clock = clock
        self.http = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

        self.id_token: Optional[str] = None
        self.refresh_token_value: Optional[str] = None
        self.token_expires_at: float = 0.0

    def _post(self, path: str, payload: dict, headers: dict) -> dict:
        try:
            response = self.http.post(path, json=payload, headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                **headers,
            })
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"bKash request to {path} failed: {e}")
            raise BadGateway("Payment gateway is unreachable")
        logger.debug(f"bKash {path} -> {response.status_code}: {sanitize_log_data(data) if isinstance(data, dict) else data}")
        if not isinstance(data, dict):
            raise BadGateway("Payment gateway returned an unexpected response")
        return data

    def _credential_headers(self) -> dict:
        return {"username": self.username or "", "password": self.password or ""}

    def _store_token(self, data: dict) -> str:
        self.id_token = data["id_token"]
        self.refresh_token_value = data.get("refresh_token")
        expires_in = int(data.get("expires_in", 3600))
        self.token_expires_at = self.clock() + expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
        return self.id_token

    def grant_token(self) -> str:
        data = self._post(
            "/tokenized/checkout/token/grant",
            {"app_key": self.app_key, "app_secret": self.app_secret},
            self._credential_headers(),
        )
        if not data.get("id_token"):
            raise BadGateway(f"bKash grant failed: {data.get('statusMessage') or data.get('msg') or 'no id_token'}")
        logger.info("bKash token granted")
        return self._store_token(data)

    def refresh_token(self) -> Optional[str]:
        """Use the refresh grant. Returns None when bKash refuses it."""
        if not self.refresh_token_value:
            return None
        data = self._post(
            "/tokenized/checkout/token/refresh",
            {
                "app_key": self.app_key,
                "app_secret": self.app_secret,
                "refresh_token": self.refresh_token_value,
            },
            self._credential_headers(),
        )
        if not data.get("id_token"):
            logger.warning("bKash token refresh rejected, falling back to grant")
            return None
        return self._store_token(data)

    def ensure_id_token(self) -> str:
        if self.id_token and self.clock() < self.token_expires_at:
            return self.id_token
        return self.refresh_token() or self.grant_token()

    def _auth_headers(self) -> dict:
        return {"Authorization": self.ensure_id_token(), "X-App-Key": self.app_key or ""}

    def create_payment(self, payload: dict) -> dict:
        data = self._post("/tokenized/checkout/create", payload, self._auth_headers())
        if not data.get("paymentID") or not data.get("bkashURL"):
            raise BadGateway(f"bKash create failed: {data.get('statusMessage') or 'missing paymentID'}")
        return data

    def execute_payment(self, payment_id: str) -> dict:
        return self._post("/tokenized/checkout/execute", {"paymentID": payment_id}, self._auth_headers())

    def query_payment(self, payment_id: str) -> dict:
        return self._post("/tokenized/checkout/payment/status", {"paymentID": payment_id}, self._auth_headers())


_client: Optional[BkashClient] = None


def get_bkash_client() -> BkashClient:
    """FastAPI dependency returning the process-wide client (keeps the token cache warm)."""
    global _client
    if _client is None:
        _client = BkashClient()
    return _client
