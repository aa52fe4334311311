"""Builders for session tokens and Shopify GraphQL payloads."""
import time

from jose import jwt

TEST_SHOP = "teststore.myshopify.com"
TEST_SECRET = "test-api-secret"


def make_session_token(
    shop: str = TEST_SHOP,
    reference_id: str = "ref-123",
    secret: str = TEST_SECRET,
    expires_in: int = 300,
) -> str:
    """Mint a token shaped like the one Shopify gives the extension."""
    now = int(time.time())
    claims = {
        "iss": "https://shopify.com",
        "aud": "test-api-key",
        "iat": now,
        "exp": now + expires_in,
        "input_data": {
            "shop": {"domain": shop},
            "initialPurchase": {"referenceId": reference_id},
        },
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def variant_node(legacy_id, price, size="M", selling_plan_gid=None):
    plan_edges = []
    if selling_plan_gid:
        plan_edges = [{"node": {"sellingPlans": {"edges": [{"node": {"id": selling_plan_gid}}]}}}]
    return {
        "price": price,
        "compareAtPrice": None,
        "id": f"gid://shopify/ProductVariant/{legacy_id}",
        "legacyResourceId": legacy_id,
        "selectedOptions": [{"name": "Size", "value": size}],
        "sellingPlanGroups": {"edges": plan_edges},
    }


def product_node(legacy_id, title, variants, image_url=None):
    return {
        "id": f"gid://shopify/Product/{legacy_id}",
        "legacyResourceId": legacy_id,
        "title": title,
        "featuredImage": {"url": image_url} if image_url else None,
        "description": f"{title} description",
        "variants": {"edges": [{"node": v} for v in variants]},
    }


def graphql_payload(*products):
    return {"data": {"products": {"edges": [{"node": p} for p in products]}}}
