"""Authentication modules for Coinbase helper client."""

from .authenticator import Authenticator
from .key_manager import KeyManager, load_credentials

__all__ = ["Authenticator", "KeyManager", "load_credentials"]
