"""Store module for e-commerce functionality.

Provides the product catalog, shopping cart, checkout, order history,
product reviews and image uploads, plus a live-update notification
channel for clients that display any of them.
"""
