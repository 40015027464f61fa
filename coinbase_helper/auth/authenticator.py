"""
Authentication handler for the Coinbase brokerage API.

Every request carries a short-lived ES256 JWT bound to its method and path.
"""

import time
from typing import Callable, Optional
import logging

import jwt

from .key_manager import KeyManager
from ..exceptions import MissingSigningKeysError

logger = logging.getLogger(__name__)

ALGORITHM = "ES256"
ISSUER = "cdp"
TOKEN_TTL_SECONDS = 120


class Authenticator:
    """
    Builds bearer tokens for brokerage requests.

    The token URI is "<METHOD> <host><path>" (no query string), so a token
    cannot be replayed against another endpoint.
    """

    def __init__(
        self,
        key_manager: KeyManager,
        host: str = "api.coinbase.com",
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize authenticator.

        Args:
            key_manager: Source of the key name and signing key
            host: API host included in the token URI
            clock: Time source (injectable for tests)
        """
        self.key_manager = key_manager
        self.host = host
        self.clock = clock

    def sign(self, method: str, path: str, now: Optional[int] = None) -> str:
        """
        Create a JWT for one request.

        Args:
            method: HTTP method
            path: Request path without query string
            now: Issue time (uses clock if None)

        Returns:
            Encoded JWT

        Raises:
            MissingCredentialsError: If credentials cannot be loaded
            MissingSigningKeysError: If keys are empty or the key is unusable
        """
        api_key, signing_key = self.key_manager.get_signing_keys()

        if now is None:
            now = int(self.clock())

        payload = {
            "iss": ISSUER,
            "nbf": now,
            "exp": now + TOKEN_TTL_SECONDS,
            "sub": api_key,
            "uri": f"{method.upper()} {self.host}{path}",
        }

        try:
            return jwt.encode(
                payload,
                signing_key,
                algorithm=ALGORITHM,
                headers={"kid": api_key}
            )
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise MissingSigningKeysError(f"Cannot sign request with configured key: {e}") from e

    def headers(self, method: str, path: str) -> dict[str, str]:
        """Authorization header for one request."""
        return {"Authorization": f"Bearer {self.sign(method, path)}"}
