"""Management command to seed the sample store catalog."""

from django.core.management.base import BaseCommand

from storefront.store.models import Category, Product
from storefront.store.services.seed import ALREADY_SEEDED, CATEGORIES, PRODUCTS, seed_database


class Command(BaseCommand):
    help = "Seed sample categories and products for the store"

    def handle(self, *args, **options):
        self.stdout.write("\nSeeding store catalog...")

        message = seed_database()
        if message == ALREADY_SEEDED:
            self.stdout.write(self.style.WARNING(f"  {message}, skipping"))
            self.stdout.write(f"  Categories: {Category.objects.count()}")
            self.stdout.write(f"  Products: {Product.objects.count()}")
            return

        for cat_data in CATEGORIES:
            self.stdout.write(self.style.SUCCESS(f"  Created category: {cat_data['name']}"))
        for product_data in PRODUCTS:
            self.stdout.write(self.style.SUCCESS(f"  Created product: {product_data['name']}"))

        self.stdout.write(self.style.SUCCESS(f"\n{message}"))
        self.stdout.write(f"  Categories: {len(CATEGORIES)}")
        self.stdout.write(f"  Products: {len(PRODUCTS)}")
