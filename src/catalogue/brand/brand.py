"""Brand aggregate — the manufacturer register products are filed against."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String

from catalogue.domain import catalogue
from catalogue.shared.slug import slugify


@catalogue.event(part_of="Brand")
class BrandRegistered:
    __version__ = 1

    brand_id: String(required=True)
    name: String(required=True)
    slug: String(required=True)


@catalogue.event(part_of="Brand")
class BrandUpdated:
    __version__ = 1

    brand_id: String(required=True)
    name: String(required=True)
    logo_url: String()


@catalogue.event(part_of="Brand")
class BrandDeactivated:
    __version__ = 1

    brand_id: String(required=True)
    deactivated_at: DateTime(required=True)


@catalogue.aggregate
class Brand:
    name: String(required=True, max_length=120)
    slug: String(required=True, max_length=130)
    logo_url: String(max_length=500)
    is_active: Boolean(default=True)
    created_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime(default=lambda: datetime.now(UTC))

    @classmethod
    def register(cls, name, logo_url=None):
        now = datetime.now(UTC)
        brand = cls(
            name=name.strip(),
            slug=slugify(name),
            logo_url=logo_url,
            created_at=now,
            updated_at=now,
        )
        brand.raise_(BrandRegistered(brand_id=str(brand.id), name=brand.name, slug=brand.slug))
        return brand

    def update(self, name=None, logo_url=None):
        if name is not None:
            self.name = name.strip()
            self.slug = slugify(name)
        if logo_url is not None:
            self.logo_url = logo_url
        self.updated_at = datetime.now(UTC)
        self.raise_(BrandUpdated(brand_id=str(self.id), name=self.name, logo_url=self.logo_url))

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"status": ["Brand is already inactive"]})
        self.is_active = False
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(BrandDeactivated(brand_id=str(self.id), deactivated_at=now))
