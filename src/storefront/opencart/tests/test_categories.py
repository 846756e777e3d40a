"""Tests for category tree maintenance."""

import pytest
from django.core.management import call_command

from storefront.conftest import create_category
from storefront.opencart.categories import (
    get_ancestor_ids,
    get_descendant_ids,
    is_valid_parent,
    rebuild_all_category_paths,
    rebuild_category_paths,
)
from storefront.opencart.models import Category, CategoryPath


def paths(category):
    return list(
        CategoryPath.objects.filter(category_id=category.category_id)
        .order_by("level")
        .values_list("path_id", "level")
    )


@pytest.fixture
def tree(db):
    """Clothing > Shirts > Polos, plus an unrelated Shoes category."""
    clothing = create_category("Clothing")
    shirts = create_category("Shirts", parent_id=clothing.category_id)
    polos = create_category("Polos", parent_id=shirts.category_id)
    shoes = create_category("Shoes")
    return clothing, shirts, polos, shoes


class TestTreeWalks:
    def test_ancestors_from_top(self, tree):
        clothing, shirts, polos, _ = tree

        assert get_ancestor_ids(polos.category_id) == [clothing.category_id, shirts.category_id, polos.category_id]

    def test_descendants(self, tree):
        clothing, shirts, polos, shoes = tree

        assert get_descendant_ids(clothing.category_id) == {shirts.category_id, polos.category_id}
        assert get_descendant_ids(shoes.category_id) == set()

    def test_cycle_does_not_loop(self, tree):
        """A corrupt tree where a category is its own ancestor still terminates."""
        clothing, _, polos, _ = tree
        Category.objects.filter(pk=clothing.pk).update(parent_id=polos.category_id)

        assert len(get_ancestor_ids(polos.category_id)) == 3


class TestIsValidParent:
    def test_top_level_is_always_valid(self, tree):
        assert is_valid_parent(tree[0].category_id, 0)

    def test_self_is_invalid(self, tree):
        assert not is_valid_parent(tree[0].category_id, tree[0].category_id)

    def test_descendant_is_invalid(self, tree):
        clothing, _, polos, _ = tree

        assert not is_valid_parent(clothing.category_id, polos.category_id)

    def test_unrelated_category_is_valid(self, tree):
        clothing, _, _, shoes = tree

        assert is_valid_parent(shoes.category_id, clothing.category_id)


class TestRebuildPaths:
    """Tests for oc_category_path maintenance."""

    def test_rebuild_subtree(self, tree):
        clothing, shirts, polos, _ = tree

        rebuilt = rebuild_category_paths(clothing.category_id)

        assert rebuilt == 3
        assert paths(clothing) == [(clothing.category_id, 0)]
        assert paths(polos) == [(clothing.category_id, 0), (shirts.category_id, 1), (polos.category_id, 2)]

    def test_rebuild_after_move(self, tree):
        """Moving a category rewrites the paths of its whole subtree."""
        clothing, shirts, polos, shoes = tree
        rebuild_all_category_paths()

        Category.objects.filter(pk=shirts.pk).update(parent_id=shoes.category_id)
        rebuild_category_paths(shirts.category_id)

        assert paths(polos) == [(shoes.category_id, 0), (shirts.category_id, 1), (polos.category_id, 2)]

    def test_rebuild_all_treats_orphans_as_top_level(self, tree):
        orphan = create_category("Orphan", parent_id=999)

        rebuilt = rebuild_all_category_paths()

        assert rebuilt == 5
        assert paths(orphan) == [(orphan.category_id, 0)]


class TestRebuildCategoryPathsCommand:
    """Tests for the rebuild_category_paths management command."""

    def test_rebuild_everything(self, tree, capsys):
        call_command("rebuild_category_paths")

        assert "Rebuilt paths for 4 categories" in capsys.readouterr().out
        assert CategoryPath.objects.count() == 1 + 2 + 3 + 1

    def test_rebuild_one_category(self, tree, capsys):
        _, shirts, _, _ = tree

        call_command("rebuild_category_paths", "--category", str(shirts.category_id))

        assert "Rebuilt paths for 2 categories" in capsys.readouterr().out

    def test_unknown_category(self, db, capsys):
        call_command("rebuild_category_paths", "--category", "999")

        assert "Category 999 does not exist" in capsys.readouterr().out
