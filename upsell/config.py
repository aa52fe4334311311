"""Application configuration."""
from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App settings
    app_name: str = "Post-Purchase Upsell API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./upsell.db"

    # Shopify app credentials (Partner Dashboard)
    shopify_api_key: str = ""
    shopify_api_secret: str = ""
    shopify_api_version: str = "2024-10"
    shopify_scopes: str = "read_products,read_orders,write_orders"
    shopify_request_timeout: int = 30

    # Offer query bounds
    offer_product_limit: int = 2
    offer_variant_limit: int = 5

    # Upsell rules
    offer_countdown_seconds: int = 300
    one_time_discount_percent: int = 50
    subscription_discount_percent: int = 20
    subscription_shipping_price: float = 10.0
    max_upsell_quantity: int = 5

    # CORS - the extension runs inside Shopify's checkout origin
    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
