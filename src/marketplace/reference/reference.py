"""Reference aggregate — one entry in an admin-maintained lookup list.

Lists are told apart by `ref_type` (`shipping_type`, `entity_type`,
`nature_of_business` ...). Names are unique within a list, ignoring case.
Entries are never deleted, only deactivated, so records that point at them
stay readable.
"""

import re
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String

from marketplace.domain import marketplace

_REF_TYPE = re.compile(r"^[a-z][a-z0-9_]*$")


def normalize_ref_type(ref_type):
    """`nature-of-business` and `nature_of_business` name the same list."""
    normalized = (ref_type or "").strip().lower().replace("-", "_")
    if not _REF_TYPE.match(normalized):
        raise ValidationError({"ref_type": [f"Invalid reference type: {ref_type}"]})
    return normalized


@marketplace.aggregate
class Reference:
    ref_type = String(required=True, max_length=50)
    name = String(required=True, max_length=150)
    code = String(max_length=50)
    display_order = Integer(default=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, ref_type, name, code=None, display_order=0, is_active=True):
        now = datetime.now(UTC)
        return cls(
            ref_type=ref_type,
            name=name.strip(),
            code=code,
            display_order=display_order,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )

    def update(self, name=None, code=None, display_order=None, is_active=None):
        if name is not None:
            self.name = name.strip()
        if code is not None:
            self.code = code
        if display_order is not None:
            self.display_order = display_order
        if is_active is not None:
            self.is_active = is_active
        self.updated_at = datetime.now(UTC)

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now(UTC)

    def as_dict(self):
        return {
            "id": str(self.id),
            "ref_type": self.ref_type,
            "name": self.name,
            "code": self.code,
            "display_order": self.display_order,
            "is_active": bool(self.is_active),
        }
