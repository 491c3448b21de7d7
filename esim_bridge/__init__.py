"""
Maya Mobile ↔ Shopify eSIM integration.
"""
