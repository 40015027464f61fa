"""API modules for Coinbase helper client."""

from .base import BaseAPIClient, RequestDescriptor
from .brokerage import BrokerageAPI

__all__ = ["BaseAPIClient", "RequestDescriptor", "BrokerageAPI"]
