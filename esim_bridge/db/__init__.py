"""
Módulo de acceso a las APIs externas (Shopify Admin REST y Maya Mobile).
"""
