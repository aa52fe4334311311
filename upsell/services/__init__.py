# Services package
from upsell.services.offer_service import offer_service
from upsell.services.session_service import session_service

__all__ = [
    "offer_service",
    "session_service",
]
