"""Post-purchase upsell API for Shopify checkout extensions."""
