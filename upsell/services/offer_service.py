"""Offer service layer - fetches upsell products from the Shopify GraphQL API."""
import logging
import requests
from typing import Optional, List

from upsell.config import settings
from upsell.schemas import Offer, OfferVariant, SelectedOption

LOG = logging.getLogger(__name__)

SELLING_PLAN_GID_PREFIX = "gid://shopify/SellingPlan/"

OFFERS_QUERY = """
query($productLimit: Int!, $variantLimit: Int!) {
  products(first: $productLimit) {
    edges {
      node {
        id
        legacyResourceId
        title
        featuredImage {
          url
        }
        description
        variants(first: $variantLimit) {
          edges {
            node {
              price
              compareAtPrice
              id
              legacyResourceId
              selectedOptions {
                name
                value
              }
              sellingPlanGroups(first: 1) {
                edges {
                  node {
                    sellingPlans(first: 1) {
                      edges {
                        node {
                          id
                        }
                      }
                    }
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""


class OfferFetchError(Exception):
    """Raised when offers cannot be loaded from Shopify, whatever the cause."""

    def __init__(self, message: str = "Failed to fetch offers from Shopify"):
        super().__init__(message)


def extract_selling_plan_id(variant_node: dict) -> Optional[str]:
    """Return the numeric id of the variant's first selling plan, if any."""
    groups = (variant_node.get("sellingPlanGroups") or {}).get("edges") or []
    if not groups:
        return None
    plans = ((groups[0].get("node") or {}).get("sellingPlans") or {}).get("edges") or []
    if not plans:
        return None
    plan_id = (plans[0].get("node") or {}).get("id")
    if not plan_id:
        return None
    return plan_id.replace(SELLING_PLAN_GID_PREFIX, "")


def format_variant(variant_node: dict) -> OfferVariant:
    return OfferVariant(
        variant_id=str(variant_node["legacyResourceId"]),
        selected_options=[
            SelectedOption(name=opt["name"], value=opt["value"])
            for opt in variant_node.get("selectedOptions") or []
        ],
        selling_plan_id=extract_selling_plan_id(variant_node),
        price=variant_node["price"],
    )


def format_offer(product_node: dict) -> Offer:
    variants = [
        format_variant(edge["node"])
        for edge in (product_node.get("variants") or {}).get("edges", [])
    ]
    featured_image = product_node.get("featuredImage") or {}

    return Offer(
        id=str(product_node["legacyResourceId"]),
        title=product_node["title"],
        product_title=product_node["title"],
        product_image_url=featured_image.get("url") or None,
        product_description=product_node.get("description"),
        original_price=variants[0].price if variants else 0,
        variants=variants,
    )


def format_offers(data: dict) -> List[Offer]:
    """Flatten the products edge/node payload into a list of offers."""
    return [format_offer(edge["node"]) for edge in data["products"]["edges"]]


class OfferService:
    """Service for loading post-purchase offers from a shop."""

    def __init__(self):
        self.api_version = settings.shopify_api_version

    def _graphql_request(self, shop: str, access_token: str, query: str, variables: dict = None) -> dict:
        """Make a GraphQL request to Shopify."""
        graphql_url = f"https://{shop}/admin/api/{self.api_version}/graphql.json"

        headers = {
            "X-Shopify-Access-Token": access_token,
            "Content-Type": "application/json"
        }
        response = requests.post(
            graphql_url,
            json={"query": query, "variables": variables or {}},
            headers=headers,
            timeout=settings.shopify_request_timeout
        )
        response.raise_for_status()
        data = response.json()

        if "errors" in data:
            raise Exception(f"GraphQL errors: {data['errors']}")

        return data.get("data", {})

    def get_offers(self, access_token: str, shop: str) -> List[Offer]:
        """
        Fetch the upsell products for a shop and reshape them into offers.

        Any failure, from the network to an unexpected payload, is reported
        as a single OfferFetchError.
        """
        variables = {
            "productLimit": settings.offer_product_limit,
            "variantLimit": settings.offer_variant_limit,
        }
        try:
            data = self._graphql_request(shop, access_token, OFFERS_QUERY, variables)
            return format_offers(data)
        except Exception as e:
            LOG.error(f"Error fetching offers for {shop}: {e}")
            raise OfferFetchError() from e


# Singleton instance
offer_service = OfferService()


def get_offers(access_token: str, shop: str) -> List[Offer]:
    return offer_service.get_offers(access_token, shop)
