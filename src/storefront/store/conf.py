"""Store configuration."""

from django.conf import settings


def get_config():
    """Get store configuration from settings."""
    defaults = {
        # Cursor pagination
        "DEFAULT_PAGE_SIZE": 20,
        "MAX_PAGE_SIZE": 100,

        # Image uploads
        "UPLOAD_URL_MAX_AGE": 3600,  # seconds
        "UPLOAD_MAX_BYTES": 5 * 1024 * 1024,

        # Catalog writes (categories, products, stock, upload URLs)
        "CATALOG_REQUIRES_STAFF": False,

        # None allows any status to follow any other
        "ORDER_STATUS_TRANSITIONS": None,

        # Live-update notifications over the channel layer
        "BROADCAST_ENABLED": True,
    }

    user_config = getattr(settings, "STORE", {})
    return {**defaults, **user_config}


def get_setting(name, default=None):
    """Get a specific store setting."""
    config = get_config()
    return config.get(name, default)
