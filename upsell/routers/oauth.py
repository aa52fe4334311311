"""Shopify OAuth flow for app installation and token management."""
import hmac
import hashlib
import logging
import re
from datetime import datetime, timezone
from urllib.parse import urlencode

import requests
from fastapi import APIRouter, Request, HTTPException, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from upsell.config import settings
from upsell.database import get_db
from upsell.schemas import OAuthCallbackResponse, OAuthStatusResponse
from upsell.services import session_service

LOG = logging.getLogger(__name__)

router = APIRouter()

SHOP_DOMAIN_RE = re.compile(r"^[a-z0-9][a-z0-9-]*\.myshopify\.com$")


def normalize_shop(shop: str) -> str:
    """Turn a bare store handle into its myshopify.com domain."""
    shop = shop.strip().lower()
    if not shop.endswith('.myshopify.com'):
        shop = f"{shop}.myshopify.com"
    return shop


def require_valid_shop(shop: str) -> str:
    """Normalize a shop and reject anything that is not a myshopify.com store."""
    shop = normalize_shop(shop)
    if not SHOP_DOMAIN_RE.match(shop):
        raise HTTPException(status_code=400, detail="Invalid shop domain")
    return shop


def verify_shopify_hmac(query_params: dict, hmac_to_verify: str) -> bool:
    """Verify the HMAC signature from Shopify."""
    client_secret = settings.shopify_api_secret
    if not client_secret or not hmac_to_verify:
        return False

    # Build message from query params (excluding hmac and signature)
    filtered_params = {k: v for k, v in query_params.items()
                      if k not in ['hmac', 'signature']}

    message = '&'.join([f"{k}={v}" for k, v in sorted(filtered_params.items())])

    computed_hmac = hmac.new(
        client_secret.encode('utf-8'),
        message.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()

    return hmac.compare_digest(computed_hmac, hmac_to_verify)


@router.get("/install")
def install_app(shop: str, request: Request):
    """
    Step 1: Redirect the merchant to the Shopify authorization page.

    Usage: https://your-app.com/api/oauth/install?shop=yourstore.myshopify.com
    """
    if not shop:
        raise HTTPException(status_code=400, detail="Missing shop parameter")

    shop = require_valid_shop(shop)

    client_id = settings.shopify_api_key
    if not client_id:
        raise HTTPException(status_code=500, detail="Shopify API key not configured")

    # Must match the redirect URL configured in the Partner Dashboard
    redirect_uri = f"{request.base_url}api/oauth/callback"

    auth_params = {
        'client_id': client_id,
        'scope': settings.shopify_scopes,
        'redirect_uri': redirect_uri,
        'state': shop,
    }

    auth_url = f"https://{shop}/admin/oauth/authorize?{urlencode(auth_params)}"

    return RedirectResponse(url=auth_url)


@router.get("/callback", response_model=OAuthCallbackResponse)
def oauth_callback(
    request: Request,
    code: str = None,
    shop: str = None,
    db: Session = Depends(get_db)
):
    """
    Step 2: Shopify redirects here after the merchant approves.
    Exchange the authorization code for an offline access token.
    """
    if not code or not shop:
        raise HTTPException(status_code=400, detail="Missing code or shop parameter")

    query_params = dict(request.query_params)
    if not verify_shopify_hmac(query_params, query_params.get('hmac', '')):
        raise HTTPException(status_code=403, detail="Invalid HMAC signature")

    shop = require_valid_shop(shop)

    token_url = f"https://{shop}/admin/oauth/access_token"
    token_data = {
        'client_id': settings.shopify_api_key,
        'client_secret': settings.shopify_api_secret,
        'code': code
    }

    try:
        response = requests.post(token_url, json=token_data, timeout=settings.shopify_request_timeout)
        response.raise_for_status()
        token_response = response.json()
    except requests.exceptions.RequestException as e:
        LOG.error(f"Token exchange failed for {shop}: {e}")
        raise HTTPException(status_code=502, detail="Failed to exchange token")

    access_token = token_response.get('access_token')
    scope = token_response.get('scope')

    if not access_token:
        raise HTTPException(status_code=502, detail="No access token received")

    session_service.save_session(db, shop, access_token, scope=scope)
    LOG.info(f"App installed for {shop} with scopes {scope}")

    return OAuthCallbackResponse(
        shop=shop,
        scope=scope,
        installed_at=datetime.now(timezone.utc)
    )


@router.get("/status", response_model=OAuthStatusResponse)
def oauth_status(shop: str, db: Session = Depends(get_db)):
    """Check whether a shop has installed the app."""
    shop = normalize_shop(shop)
    session = session_service.get_session(db, shop)

    return OAuthStatusResponse(
        shop=shop,
        installed=bool(session and session.access_token),
        scope=session.scope if session else None,
        token_preview=f"{session.access_token[:8]}..." if session and session.access_token else None,
        client_id_set=bool(settings.shopify_api_key),
        client_secret_set=bool(settings.shopify_api_secret),
    )
