"""
Signing key management.

Thread-safe, lazily loaded holder for the Coinbase CDP API key.
"""

import threading
from pathlib import Path
from typing import Optional, Union
import logging

import orjson
from pydantic import ValidationError as PydanticValidationError

from ..models import Credentials
from ..exceptions import MissingCredentialsError, MissingSigningKeysError

logger = logging.getLogger(__name__)


def load_credentials(path: Union[str, Path]) -> Credentials:
    """
    Load and parse the CDP key file.

    Args:
        path: JSON file with {"name": ..., "privateKey": ...}

    Returns:
        Parsed credentials

    Raises:
        MissingCredentialsError: If the file is missing, empty or malformed
    """
    logger.debug(f"Loading credentials from {path}")
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise MissingCredentialsError(f"Cannot load credentials: {e}", path=str(path)) from e

    if not raw.strip():
        raise MissingCredentialsError("Cannot load credentials: file is empty.", path=str(path))

    try:
        return Credentials.model_validate(orjson.loads(raw))
    except orjson.JSONDecodeError as e:
        raise MissingCredentialsError(
            f"Credentials file is not valid JSON: {e}", path=str(path)
        ) from e
    except PydanticValidationError as e:
        raise MissingCredentialsError(
            f"Credentials file has an invalid shape: {e}", path=str(path)
        ) from e


class KeyManager:
    """
    Holds the API key name and signing key.

    Keys are read from the credentials file on first use and reused after
    that. Population is serialized so concurrent first calls read the file
    once.
    """

    def __init__(
        self,
        credentials_path: Optional[Union[str, Path]] = None,
        credentials: Optional[Credentials] = None
    ):
        """
        Initialize key manager.

        Args:
            credentials_path: Credentials file to load lazily
            credentials: Already loaded credentials (skips the file)
        """
        self.credentials_path = credentials_path
        self._credentials = credentials
        self._lock = threading.Lock()

    def has_signing_keys(self) -> bool:
        """True once a non-empty key name and signing key are loaded."""
        creds = self._credentials
        return bool(creds and creds.name and creds.private_key)

    def load(self) -> Credentials:
        """
        Load credentials if not loaded yet.

        Raises:
            MissingCredentialsError: If no path is configured or the file is bad
        """
        if self._credentials is not None:
            return self._credentials

        with self._lock:
            if self._credentials is None:
                if not self.credentials_path:
                    raise MissingCredentialsError("No credentials path configured")
                self._credentials = load_credentials(self.credentials_path)
                logger.info(f"Loaded signing key {self._credentials.name}")
            return self._credentials

    def get_signing_keys(self) -> tuple[str, str]:
        """
        Get (api_key_name, private_key), loading them on first use.

        Raises:
            MissingCredentialsError: If the credentials file cannot be read
            MissingSigningKeysError: If the key name or private key is empty
        """
        self.load()
        if not self.has_signing_keys():
            raise MissingSigningKeysError("Signing keys are missing from credentials")
        return self._credentials.name, self._credentials.private_key

    def clear(self) -> None:
        """Forget loaded keys (next use reloads the file)."""
        with self._lock:
            self._credentials = None
            logger.info("Cleared signing keys")
