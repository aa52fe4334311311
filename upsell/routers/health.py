"""Health check and status endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from upsell.database import get_db
from upsell.config import settings
from upsell.formatting import format_currency, format_time

router = APIRouter()


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Check API and database health."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "database": db_status,
        "shopify_configured": bool(settings.shopify_api_key and settings.shopify_api_secret)
    }


@router.get("/config")
def get_config():
    """Get current configuration (non-sensitive)."""
    return {
        "app_version": settings.app_version,
        "shopify_api_version": settings.shopify_api_version,
        "shopify_scopes": settings.shopify_scopes,
        "offer_limits": {
            "products": settings.offer_product_limit,
            "variants": settings.offer_variant_limit
        },
        "upsell_rules": {
            "countdown_seconds": settings.offer_countdown_seconds,
            "countdown_display": format_time(settings.offer_countdown_seconds),
            "one_time_discount_percent": settings.one_time_discount_percent,
            "subscription_discount_percent": settings.subscription_discount_percent,
            "subscription_shipping_price": settings.subscription_shipping_price,
            "subscription_shipping_display": format_currency(f"{settings.subscription_shipping_price:.2f}"),
            "max_quantity": settings.max_upsell_quantity
        }
    }
