"""Category management — commands and handlers."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from catalogue.category.category import Category
from catalogue.category.hierarchy import find_by_slug, would_create_cycle
from catalogue.domain import catalogue
from catalogue.shared.slug import slugify


@catalogue.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=150)
    slug: String(max_length=160)
    description: Text()
    parent_id: Identifier()
    is_controlled: Boolean(default=False)
    display_order: Integer(default=0)


@catalogue.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(max_length=150)
    description: Text()
    display_order: Integer()
    is_controlled: Boolean()


@catalogue.command(part_of="Category")
class MoveCategory:
    category_id: Identifier(required=True)
    new_parent_id: Identifier()


@catalogue.command(part_of="Category")
class ActivateCategory:
    category_id: Identifier(required=True)


@catalogue.command(part_of="Category")
class DeactivateCategory:
    category_id: Identifier(required=True)


@catalogue.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)

        slug = command.slug or slugify(command.name)
        if find_by_slug(slug) is not None:
            raise ValidationError({"slug": [f"Category slug '{slug}' is already in use"]})

        if command.parent_id:
            # Raises ObjectNotFoundError for an unknown parent
            repo.get(command.parent_id)

        category = Category.create(
            name=command.name,
            slug=slug,
            description=command.description,
            parent_id=command.parent_id,
            is_controlled=command.is_controlled,
            display_order=command.display_order,
        )
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.update_details(
            name=command.name,
            description=command.description,
            display_order=command.display_order,
            is_controlled=command.is_controlled,
        )
        repo.add(category)

    @handle(MoveCategory)
    def move_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)

        if command.new_parent_id:
            repo.get(command.new_parent_id)
        if would_create_cycle(command.category_id, command.new_parent_id):
            raise ValidationError({"parent_id": ["Moving here would create a cycle in the category tree"]})

        category.move_to(command.new_parent_id)
        repo.add(category)

    @handle(ActivateCategory)
    def activate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.activate()
        repo.add(category)

    @handle(DeactivateCategory)
    def deactivate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.deactivate()
        repo.add(category)
