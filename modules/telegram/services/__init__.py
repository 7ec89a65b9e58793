"""
Gateway Services.

Backend link client and outbound Telegram delivery.
"""

from modules.telegram.services.backend_client import BackendClient
from modules.telegram.services.delivery import (
    BatchDeliveryResult,
    DeliveryResult,
    DeliveryService,
)

__all__ = [
    "BackendClient",
    "BatchDeliveryResult",
    "DeliveryResult",
    "DeliveryService",
]
