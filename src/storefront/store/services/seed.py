"""Sample catalog data for demos and local development."""

import logging
from decimal import Decimal

from django.db import transaction

from ..models import Category, Product
from .broadcast import BroadcastService, topics

logger = logging.getLogger(__name__)


CATEGORIES = [
    {
        "key": "electronics",
        "name": "Electronics",
        "description": "Latest gadgets and electronic devices",
    },
    {
        "key": "clothing",
        "name": "Clothing",
        "description": "Fashion and apparel for all occasions",
    },
    {
        "key": "home",
        "name": "Home & Garden",
        "description": "Everything for your home and garden",
    },
    {
        "key": "books",
        "name": "Books",
        "description": "Books, magazines, and educational materials",
    },
]


PRODUCTS = [
    {
        "name": "Wireless Bluetooth Headphones",
        "description": "High-quality wireless headphones with noise cancellation and 30-hour battery life",
        "price": "199.99",
        "category": "electronics",
        "stock": 50,
        "tags": ["audio", "wireless", "bluetooth"],
    },
    {
        "name": "Smartphone Pro Max",
        "description": "Latest flagship smartphone with advanced camera system and 5G connectivity",
        "price": "999.99",
        "category": "electronics",
        "stock": 25,
        "tags": ["phone", "5g", "camera"],
    },
    {
        "name": "Laptop Gaming Edition",
        "description": "High-performance gaming laptop with RTX graphics and 16GB RAM",
        "price": "1499.99",
        "category": "electronics",
        "stock": 15,
        "tags": ["laptop", "gaming", "performance"],
    },
    {
        "name": "Classic Cotton T-Shirt",
        "description": "Comfortable 100% cotton t-shirt available in multiple colors",
        "price": "24.99",
        "category": "clothing",
        "stock": 100,
        "tags": ["cotton", "casual", "basic"],
    },
    {
        "name": "Designer Jeans",
        "description": "Premium denim jeans with modern fit and sustainable materials",
        "price": "89.99",
        "category": "clothing",
        "stock": 75,
        "tags": ["denim", "sustainable", "fashion"],
    },
    {
        "name": "Smart Home Hub",
        "description": "Central control hub for all your smart home devices",
        "price": "149.99",
        "category": "home",
        "stock": 30,
        "tags": ["smart", "home", "automation"],
    },
    {
        "name": "Coffee Maker Deluxe",
        "description": "Professional-grade coffee maker with programmable settings",
        "price": "299.99",
        "category": "home",
        "stock": 20,
        "tags": ["coffee", "kitchen", "appliance"],
    },
    {
        "name": "Programming Fundamentals",
        "description": "Comprehensive guide to learning programming from scratch",
        "price": "39.99",
        "category": "books",
        "stock": 200,
        "tags": ["programming", "education", "technology"],
    },
    {
        "name": "The Art of Design",
        "description": "Beautiful coffee table book showcasing modern design principles",
        "price": "59.99",
        "category": "books",
        "stock": 40,
        "tags": ["design", "art", "coffee-table"],
    },
]

ALREADY_SEEDED = "Database already seeded"
SEEDED = "Database seeded successfully"


@transaction.atomic
def seed_database() -> str:
    """Insert the sample catalog unless any category already exists."""
    if Category.objects.exists():
        return ALREADY_SEEDED

    category_map = {}
    for cat_data in CATEGORIES:
        category_map[cat_data["key"]] = Category.objects.create(
            name=cat_data["name"],
            description=cat_data["description"],
        )

    for product_data in PRODUCTS:
        Product.objects.create(
            name=product_data["name"],
            description=product_data["description"],
            price=Decimal(product_data["price"]),
            category=category_map[product_data["category"]],
            stock=product_data["stock"],
            tags=product_data["tags"],
            is_active=True,
        )

    BroadcastService.publish_on_commit([topics.CATEGORIES, topics.CATALOG], event="catalog.seeded")
    logger.info(f"Seeded {len(CATEGORIES)} categories and {len(PRODUCTS)} products")
    return SEEDED
