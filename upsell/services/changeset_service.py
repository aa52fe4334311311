"""Changeset service layer - builds and signs post-purchase order changes."""
import time
import uuid
import logging
from typing import Optional, List, Dict, Any

from jose import jwt

from upsell.config import settings
from upsell.schemas import Offer

LOG = logging.getLogger(__name__)

ONE_TIME = "one_time"
SUBSCRIPTION = "subscription"

SUBSCRIPTION_SHIPPING_TITLE = "Subscription shipping line"

CHANGE_TYPES = {
    "add_variant": ONE_TIME,
    "add_subscription": SUBSCRIPTION,
}


class ChangesetSigningError(Exception):
    """Raised when the app is missing the credentials needed to sign."""


def _discount(percent: int) -> Dict[str, Any]:
    return {
        "value": percent,
        "valueType": "percentage",
        "title": f"Save {percent}%",
    }


def build_change(
    variant_id: str,
    purchase_type: str = ONE_TIME,
    quantity: int = 1,
    selling_plan_id: Optional[str] = None
) -> Dict[str, Any]:
    """Build one line-item addition under the upsell discount rules."""
    if not variant_id or not isinstance(variant_id, str):
        raise ValueError("Variant ID is required")
    if not isinstance(quantity, int) or isinstance(quantity, bool):
        raise ValueError("Quantity must be an integer")
    if not 1 <= quantity <= settings.max_upsell_quantity:
        raise ValueError(f"Quantity must be between 1 and {settings.max_upsell_quantity}")

    if purchase_type == ONE_TIME:
        return {
            "type": "add_variant",
            "variantId": variant_id,
            "quantity": quantity,
            "discount": _discount(settings.one_time_discount_percent),
        }

    if purchase_type != SUBSCRIPTION:
        raise ValueError(f"Unknown purchase type: {purchase_type}")
    if not selling_plan_id:
        raise ValueError(f"Variant {variant_id} has no selling plan")

    return {
        "type": "add_subscription",
        "variantId": variant_id,
        "quantity": quantity,
        "sellingPlanId": selling_plan_id,
        "initialShippingPrice": settings.subscription_shipping_price,
        "recurringShippingPrice": settings.subscription_shipping_price,
        "discount": _discount(settings.subscription_discount_percent),
        "shippingOption": {
            "title": SUBSCRIPTION_SHIPPING_TITLE,
            "presentmentTitle": SUBSCRIPTION_SHIPPING_TITLE,
        },
    }


def build_changes(
    offer: Offer,
    variant_index: int = 0,
    purchase_type: str = ONE_TIME,
    quantity: int = 1
) -> List[Dict[str, Any]]:
    """
    Build the change list that adds the chosen offer variant to the order.

    A one-time purchase adds the variant at the one-time discount; a
    subscription adds it on the variant's selling plan with its own
    discount and a subscription shipping line.
    """
    if not 0 <= variant_index < len(offer.variants):
        raise ValueError(f"Offer {offer.id} has no variant at index {variant_index}")

    variant = offer.variants[variant_index]
    return [build_change(variant.variant_id, purchase_type, quantity, variant.selling_plan_id)]


def validate_changes(changes: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Check posted changes against the discount and shipping rules.

    Each change must be exactly what build_change produces for its own
    variant, quantity and selling plan.
    """
    for change in changes:
        purchase_type = CHANGE_TYPES.get(change.get("type"))
        if purchase_type is None:
            raise ValueError(f"Unsupported change type: {change.get('type')}")

        expected = build_change(
            change.get("variantId"),
            purchase_type,
            change.get("quantity"),
            change.get("sellingPlanId"),
        )
        if change != expected:
            raise ValueError(f"Change for variant {change.get('variantId')} does not match the offer rules")

    return changes


def sign_changeset(reference_id: str, changes: List[Dict[str, Any]]) -> str:
    """Sign a changeset so the extension can apply it with Shopify."""
    if not settings.shopify_api_secret:
        raise ChangesetSigningError("Shopify API secret not configured")

    payload = {
        "iss": settings.shopify_api_key,
        "jti": str(uuid.uuid4()),
        "iat": int(time.time()),
        "sub": reference_id,
        "changes": changes,
    }
    LOG.info(f"Signing changeset for purchase {reference_id} ({len(changes)} change(s))")
    return jwt.encode(payload, settings.shopify_api_secret, algorithm="HS256")
