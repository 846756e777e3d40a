"""Category tree maintenance.

OpenCart keeps a materialized ancestor table (``oc_category_path``): every
category has one row per ancestor, including itself, where ``level`` is the
ancestor's depth (0 for the top-level category).
"""

import logging

from django.db import transaction

from .models import Category, CategoryPath

logger = logging.getLogger(__name__)


def get_ancestor_ids(category_id: int) -> list[int]:
    """Return the ids from the top-level ancestor down to ``category_id``.

    Walking stops at a missing parent or when a parent repeats, so a corrupt
    tree never loops.
    """
    parents = dict(Category.objects.values_list("category_id", "parent_id"))
    chain = []
    seen = set()
    current = category_id
    while current and current in parents and current not in seen:
        seen.add(current)
        chain.append(current)
        current = parents[current]
    chain.reverse()
    return chain


def get_descendant_ids(category_id: int) -> set[int]:
    """Return every category below ``category_id`` (not including it)."""
    children_of = {}
    for child_id, parent_id in Category.objects.values_list("category_id", "parent_id"):
        children_of.setdefault(parent_id, []).append(child_id)

    found = set()
    stack = list(children_of.get(category_id, []))
    while stack:
        child_id = stack.pop()
        if child_id in found or child_id == category_id:
            continue
        found.add(child_id)
        stack.extend(children_of.get(child_id, []))
    return found


def is_valid_parent(category_id: int, parent_id: int) -> bool:
    """A category cannot be moved under itself or one of its descendants."""
    if not parent_id:
        return True
    return parent_id != category_id and parent_id not in get_descendant_ids(category_id)


def rebuild_category_paths(category_id: int, _seen: set | None = None) -> int:
    """Rebuild path rows for a category and, recursively, its children.

    Returns:
        Number of categories rebuilt
    """
    seen = _seen if _seen is not None else set()
    if category_id in seen:
        return 0
    seen.add(category_id)

    CategoryPath.objects.filter(category_id=category_id).delete()
    CategoryPath.objects.bulk_create(
        CategoryPath(category_id=category_id, path_id=path_id, level=level)
        for level, path_id in enumerate(get_ancestor_ids(category_id))
    )

    rebuilt = 1
    for child_id in Category.objects.filter(parent_id=category_id).values_list("category_id", flat=True):
        rebuilt += rebuild_category_paths(child_id, seen)
    return rebuilt


@transaction.atomic
def rebuild_all_category_paths() -> int:
    """Truncate ``oc_category_path`` and rebuild it from the top-level categories.

    Categories whose parent no longer exists are treated as top-level.
    """
    CategoryPath.objects.all().delete()

    existing = set(Category.objects.values_list("category_id", flat=True))
    seen = set()
    rebuilt = 0
    for category_id, parent_id in Category.objects.order_by("category_id").values_list("category_id", "parent_id"):
        if parent_id == 0 or parent_id not in existing:
            rebuilt += rebuild_category_paths(category_id, seen)

    logger.info("Rebuilt category paths for %d categories", rebuilt)
    return rebuilt
