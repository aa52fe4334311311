"""Pydantic schemas for request/response validation."""
from datetime import datetime
from typing import Optional, List, Dict, Any, Union
from pydantic import BaseModel, Field


# ============================================================================
# Offer Schemas
# ============================================================================

class SelectedOption(BaseModel):
    name: str
    value: str


class OfferVariant(BaseModel):
    variant_id: str = Field(alias="variantID")
    selected_options: List[SelectedOption] = Field(default=[], alias="selectedOptions")
    selling_plan_id: Optional[str] = Field(default=None, alias="sellingPlanId")
    price: str

    class Config:
        populate_by_name = True


class Offer(BaseModel):
    id: str
    title: str
    product_title: str = Field(alias="productTitle")
    product_image_url: Optional[str] = Field(default=None, alias="productImageURL")
    product_description: Optional[str] = Field(default=None, alias="productDescription")
    # Price string of the first variant, or 0 when the product has none
    original_price: Union[str, int] = Field(default=0, alias="originalPrice")
    variants: List[OfferVariant] = []

    class Config:
        populate_by_name = True


class OfferRequest(BaseModel):
    reference_id: Optional[str] = Field(default=None, alias="referenceId")

    class Config:
        populate_by_name = True


class OffersResponse(BaseModel):
    offers: List[Offer]
    time: int


# ============================================================================
# Changeset Schemas
# ============================================================================

class SignChangesetRequest(BaseModel):
    reference_id: str = Field(alias="referenceId")
    changes: List[Dict[str, Any]] = Field(min_length=1)

    class Config:
        populate_by_name = True


class SignChangesetResponse(BaseModel):
    token: str


# ============================================================================
# OAuth Schemas
# ============================================================================

class OAuthCallbackResponse(BaseModel):
    shop: str
    scope: Optional[str] = None
    installed_at: datetime


class OAuthStatusResponse(BaseModel):
    shop: str
    installed: bool
    scope: Optional[str] = None
    token_preview: Optional[str] = None
    client_id_set: bool
    client_secret_set: bool
