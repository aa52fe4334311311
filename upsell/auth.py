"""
Authentication for requests coming from the post-purchase checkout extension.

The extension sends the session token Shopify hands it (``inputData.token``)
as a Bearer token. It is an HS256 JWT signed with the app's API secret.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from fastapi import HTTPException, Request, status
from jose import jwt, JWTError

from upsell.config import settings


@dataclass
class CheckoutSession:
    """Verified claims of a checkout session token."""
    shop: str
    reference_id: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict)


def decode_session_token(token: str) -> Dict[str, Any]:
    """
    Verify a session token and return its claims.

    Raises:
        HTTPException: If the secret is not configured or the token is invalid
    """
    if not settings.shopify_api_secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Shopify API secret not configured"
        )

    try:
        claims = jwt.decode(
            token,
            settings.shopify_api_secret,
            algorithms=["HS256"],
            audience=settings.shopify_api_key or None,
            options={"verify_aud": bool(settings.shopify_api_key)},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    # jose skips the audience check when the claim is absent
    if settings.shopify_api_key and not _has_audience(claims, settings.shopify_api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    return claims


def _has_audience(claims: Dict[str, Any], audience: str) -> bool:
    aud = claims.get("aud")
    if isinstance(aud, list):
        return audience in aud
    return aud == audience


def authenticate_checkout(request: Request) -> CheckoutSession:
    """FastAPI dependency resolving the checkout session of the caller."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header"
        )

    claims = decode_session_token(auth_header[7:])

    input_data = claims.get("input_data") or {}
    shop = (input_data.get("shop") or {}).get("domain")
    if not shop:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is missing the shop domain"
        )

    reference_id = (input_data.get("initialPurchase") or {}).get("referenceId")
    return CheckoutSession(shop=shop, reference_id=reference_id, claims=claims)
