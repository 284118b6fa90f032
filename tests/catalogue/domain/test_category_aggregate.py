"""Tests for the Category aggregate."""

import pytest
from catalogue.category.category import Category
from catalogue.category.events import CategoryCreated, CategoryDeactivated, CategoryMoved
from catalogue.shared.slug import slugify
from protean.exceptions import ValidationError


class TestCategoryCreation:
    def test_slug_derived_from_name(self):
        category = Category.create(name="Auto Parts & Tyres")
        assert category.slug == "auto-parts-tyres"

    def test_explicit_slug_kept(self):
        assert Category.create(name="Tyres", slug="all-tyres").slug == "all-tyres"

    def test_defaults(self):
        category = Category.create(name="Tools")
        assert category.is_active is True
        assert category.is_controlled is False
        assert category.display_order == 0

    def test_raises_created_event(self):
        category = Category.create(name="Medicines", is_controlled=True)
        event = category._events[0]
        assert isinstance(event, CategoryCreated)
        assert event.is_controlled is True


class TestCategoryParent:
    def test_cannot_be_its_own_parent(self):
        category = Category.create(name="Tools")
        with pytest.raises(ValidationError) as exc:
            category.move_to(category.id)
        assert "own parent" in str(exc.value)

    def test_move_records_previous_parent(self):
        category = Category.create(name="Drills", parent_id="old-parent")
        category._events.clear()
        category.move_to("new-parent")

        event = category._events[0]
        assert isinstance(event, CategoryMoved)
        assert event.previous_parent_id == "old-parent"
        assert event.new_parent_id == "new-parent"


class TestCategoryActivation:
    def test_deactivate(self):
        category = Category.create(name="Tools")
        category.deactivate()
        assert category.is_active is False
        assert isinstance(category._events[-1], CategoryDeactivated)

    def test_deactivate_twice_rejected(self):
        category = Category.create(name="Tools")
        category.deactivate()
        with pytest.raises(ValidationError):
            category.deactivate()

    def test_activate_active_rejected(self):
        with pytest.raises(ValidationError):
            Category.create(name="Tools").activate()


class TestSlugify:
    def test_collapses_separators(self):
        assert slugify("  Home -- Garden  ") == "home-garden"
