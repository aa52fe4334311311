"""Offer endpoints consumed by the post-purchase checkout extension."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from upsell.auth import CheckoutSession, authenticate_checkout
from upsell.config import settings
from upsell.database import get_db
from upsell.schemas import OfferRequest, OffersResponse
from upsell.services import offer_service, session_service
from upsell.services.offer_service import OfferFetchError

LOG = logging.getLogger(__name__)

router = APIRouter()


@router.get("/offer", status_code=204, response_class=Response)
def offer_preflight(checkout: CheckoutSession = Depends(authenticate_checkout)):
    """Existence check made by Shopify before the extension posts."""
    return Response(status_code=204)


@router.post("/offer", response_model=OffersResponse)
def get_offers(
    request: Optional[OfferRequest] = None,
    checkout: CheckoutSession = Depends(authenticate_checkout),
    db: Session = Depends(get_db)
):
    """
    Return the upsell offers for the shop in the session token.

    The countdown in ``time`` is how long the buyer has to accept.
    """
    shop = checkout.shop
    if request and request.reference_id:
        LOG.info(f"Offer request from {shop} for purchase {request.reference_id}")

    access_token = session_service.get_access_token(db, shop)
    if not access_token:
        raise HTTPException(status_code=404, detail="No session found for shop")

    try:
        offers = offer_service.get_offers(access_token, shop)
    except OfferFetchError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return OffersResponse(offers=offers, time=settings.offer_countdown_seconds)
