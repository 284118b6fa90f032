"""EmailAddress value object for validated, lower-cased email addresses."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from identity.domain import identity

_LOCAL_PART = re.compile(r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~.-]+$")
_DOMAIN_LABEL = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")


def normalize_email(raw: str) -> str:
    return (raw or "").strip().lower()


@identity.value_object
class EmailAddress:
    """An email address used as the login identity of an Account.

    Stored lower-cased; one @, a dotted domain, no empty or hyphen-edged
    labels and no consecutive dots.
    """

    address: String(required=True, max_length=254)

    @invariant.post
    def must_be_well_formed(self):
        email = self.address
        invalid = ValidationError({"email": [f"Invalid email address: {email!r}"]})

        if email.count("@") != 1:
            raise invalid

        local_part, domain_part = email.split("@", 1)
        if not local_part or local_part.startswith(".") or local_part.endswith(".") or ".." in local_part:
            raise invalid
        if not _LOCAL_PART.match(local_part):
            raise invalid

        labels = domain_part.split(".")
        if len(labels) < 2 or not all(_DOMAIN_LABEL.match(label) for label in labels):
            raise invalid

    @invariant.post
    def must_be_lower_case(self):
        if self.address != self.address.lower():
            raise ValidationError({"email": ["Email addresses are stored in lower case"]})
