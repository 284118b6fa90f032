"""Domain events for the Category aggregate."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from catalogue.domain import catalogue


@catalogue.event(part_of="Category")
class CategoryCreated:
    """A new category was added to the tree."""

    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    parent_id: Identifier()
    is_controlled: Boolean(default=False)


@catalogue.event(part_of="Category")
class CategoryUpdated:
    """Category name, description, ordering or controlled flag changed."""

    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    display_order: Integer()
    is_controlled: Boolean()


@catalogue.event(part_of="Category")
class CategoryMoved:
    """A category was re-parented."""

    __version__ = 1

    category_id: Identifier(required=True)
    previous_parent_id: Identifier()
    new_parent_id: Identifier()


@catalogue.event(part_of="Category")
class CategoryActivated:
    __version__ = 1

    category_id: Identifier(required=True)
    activated_at: DateTime(required=True)


@catalogue.event(part_of="Category")
class CategoryDeactivated:
    __version__ = 1

    category_id: Identifier(required=True)
    deactivated_at: DateTime(required=True)
