"""Management command to rebuild the OpenCart category path table."""

from django.core.management.base import BaseCommand
from django.db import transaction

from storefront.opencart.categories import rebuild_all_category_paths, rebuild_category_paths
from storefront.opencart.models import Category


class Command(BaseCommand):
    help = "Rebuild oc_category_path for every category, or for one category and its subtree"

    def add_arguments(self, parser):
        parser.add_argument(
            "--category",
            type=int,
            help="Only rebuild this category and its children",
        )

    def handle(self, *args, **options):
        category_id = options.get("category")

        if category_id:
            if not Category.objects.filter(category_id=category_id).exists():
                self.stdout.write(self.style.ERROR(f"Category {category_id} does not exist"))
                return
            with transaction.atomic():
                rebuilt = rebuild_category_paths(category_id)
        else:
            rebuilt = rebuild_all_category_paths()

        self.stdout.write(self.style.SUCCESS(f"Rebuilt paths for {rebuilt} categories"))
