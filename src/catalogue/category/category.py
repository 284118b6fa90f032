"""Category aggregate root for product categorization."""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from catalogue.domain import catalogue
from catalogue.shared.slug import slugify


@catalogue.aggregate
class Category:
    """A node in the category tree.

    Categories nest through `parent_id`. Marking a category as controlled
    makes every product filed under it, or under any of its descendants,
    a controlled item for order compliance.
    """

    name: String(required=True, max_length=150)
    slug: String(required=True, max_length=160)
    description: Text()
    parent_id: Identifier()
    is_controlled: Boolean(default=False)
    is_active: Boolean(default=True)
    display_order: Integer(default=0)
    created_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def cannot_be_its_own_parent(self):
        if self.parent_id and str(self.parent_id) == str(self.id):
            raise ValidationError({"parent_id": ["A category cannot be its own parent"]})

    @classmethod
    def create(cls, name, slug=None, description=None, parent_id=None, is_controlled=False, display_order=0):
        from catalogue.category.events import CategoryCreated

        now = datetime.now(UTC)
        category = cls(
            name=name,
            slug=slug or slugify(name),
            description=description,
            parent_id=parent_id,
            is_controlled=bool(is_controlled),
            display_order=display_order or 0,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=category.id,
                name=category.name,
                slug=category.slug,
                parent_id=parent_id,
                is_controlled=category.is_controlled,
            )
        )
        return category

    def update_details(self, name=None, description=None, display_order=None, is_controlled=None):
        from catalogue.category.events import CategoryUpdated

        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if display_order is not None:
            self.display_order = display_order
        if is_controlled is not None:
            self.is_controlled = is_controlled

        self.updated_at = datetime.now(UTC)

        self.raise_(
            CategoryUpdated(
                category_id=self.id,
                name=self.name,
                display_order=self.display_order,
                is_controlled=self.is_controlled,
            )
        )

    def move_to(self, new_parent_id):
        from catalogue.category.events import CategoryMoved

        previous = self.parent_id
        self.parent_id = new_parent_id
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CategoryMoved(
                category_id=self.id,
                previous_parent_id=previous,
                new_parent_id=new_parent_id,
            )
        )

    def activate(self):
        from catalogue.category.events import CategoryActivated

        if self.is_active:
            raise ValidationError({"status": ["Category is already active"]})

        self.is_active = True
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(CategoryActivated(category_id=self.id, activated_at=now))

    def deactivate(self):
        from catalogue.category.events import CategoryDeactivated

        if not self.is_active:
            raise ValidationError({"status": ["Category is already inactive"]})

        self.is_active = False
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(CategoryDeactivated(category_id=self.id, deactivated_at=now))
