"""Access token lifecycle for the Daraja API"""

import base64
import logging
import time
from typing import Callable

import requests

from .config import MpesaConfig
from .errors import AuthenticationError
from .types import Credential

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/v1/generate?grant_type=client_credentials"


def basic_auth_header(consumer_key: str, consumer_secret: str) -> str:
    raw = f"{consumer_key}:{consumer_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("utf-8")


class TokenManager:
    """
    Fetches and caches the client-credentials access token.

    The cached credential is replaced in a single assignment, so a reader
    never sees a new token paired with an old expiry. There is no lock:
    two callers racing on an expired token both refresh, which only costs
    an extra request.
    """

    def __init__(
        self,
        config: MpesaConfig,
        clock: Callable[[], float] = time.time,
        timeout: float | None = None,
    ):
        self.config = config
        self.clock = clock
        self.timeout = timeout
        self._credential: Credential | None = None

    @property
    def credential(self) -> Credential | None:
        return self._credential

    def ensure_token(self) -> str:
        """
        Return a usable access token, fetching a new one if needed.

        Returns:
            Bearer token string

        Raises:
            AuthenticationError: if the token endpoint could not be used;
                the underlying exception is chained as the cause
        """
        credential = self._credential
        if credential is not None and credential.is_valid(self.clock()):
            return credential.token

        credential = self.refresh()
        return credential.token

    def refresh(self) -> Credential:
        """Fetch a new token unconditionally and cache it."""
        now = self.clock()
        data = self._fetch()
        try:
            credential = Credential.from_response(data, now)
        except (KeyError, TypeError, ValueError) as e:
            raise AuthenticationError(f"Unexpected token response: {data}") from e
        if not credential.token:
            raise AuthenticationError(f"Empty access_token in token response: {data}")

        self._credential = credential
        logger.info("Obtained M-Pesa access token, valid until %s", credential.expires_at)
        return credential

    def invalidate(self) -> None:
        self._credential = None

    def _fetch(self) -> dict:
        url = f"{self.config.base_url}{TOKEN_PATH}"
        headers = {
            "Authorization": basic_auth_header(self.config.consumer_key, self.config.consumer_secret),
        }

        try:
            response = requests.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("M-Pesa token request failed: %s", e)
            raise AuthenticationError(f"Token request failed: {e}") from e

        if not response.ok:
            logger.error("M-Pesa token request rejected: HTTP %s - %s", response.status_code, response.text)
            raise AuthenticationError(
                f"Token request failed: HTTP {response.status_code} - {response.text}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise AuthenticationError(f"Token response is not JSON: {response.text}") from e
