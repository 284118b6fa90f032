"""SKU value object for vendor stock keeping unit codes."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from catalogue.domain import catalogue

_SKU_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*[A-Za-z0-9]$")


@catalogue.value_object
class SKU:
    """Vendor-assigned stock code, e.g. "TYR-265-65R17" or "OIL.5W30.4L".

    Letters, digits, dots, underscores and hyphens; must start and end with
    an alphanumeric character.
    """

    code: String(required=True, max_length=64, min_length=2)

    @invariant.post
    def code_must_be_valid_format(self):
        if not _SKU_PATTERN.match(self.code):
            raise ValidationError(
                {"sku": ["SKU may only contain letters, digits, '.', '_' or '-' and must not start or end with them"]}
            )
