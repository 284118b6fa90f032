"""Brand management — commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from catalogue.brand.brand import Brand
from catalogue.domain import catalogue


@catalogue.command(part_of="Brand")
class CreateBrand:
    name: String(required=True, max_length=120)
    logo_url: String(max_length=500)


@catalogue.command(part_of="Brand")
class UpdateBrand:
    brand_id: Identifier(required=True)
    name: String(max_length=120)
    logo_url: String(max_length=500)


@catalogue.command(part_of="Brand")
class DeactivateBrand:
    brand_id: Identifier(required=True)


def list_brands(active_only=True):
    query = current_domain.repository_for(Brand)._dao.query
    if active_only:
        query = query.filter(is_active=True)
    return sorted(query.limit(1000).all().items, key=lambda b: b.name.lower())


def _assert_name_available(name, exclude_id=None):
    wanted = name.strip().lower()
    for brand in list_brands(active_only=False):
        if brand.name.lower() == wanted and str(brand.id) != str(exclude_id):
            raise ValidationError({"name": [f"Brand '{name}' already exists"]})


@catalogue.command_handler(part_of=Brand)
class ManageBrandHandler:
    @handle(CreateBrand)
    def create_brand(self, command):
        _assert_name_available(command.name)
        brand = Brand.register(name=command.name, logo_url=command.logo_url)
        current_domain.repository_for(Brand).add(brand)
        return str(brand.id)

    @handle(UpdateBrand)
    def update_brand(self, command):
        repo = current_domain.repository_for(Brand)
        brand = repo.get(command.brand_id)
        if command.name:
            _assert_name_available(command.name, exclude_id=brand.id)
        brand.update(name=command.name, logo_url=command.logo_url)
        repo.add(brand)

    @handle(DeactivateBrand)
    def deactivate_brand(self, command):
        repo = current_domain.repository_for(Brand)
        brand = repo.get(command.brand_id)
        brand.deactivate()
        repo.add(brand)
