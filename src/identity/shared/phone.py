"""Phone number normalisation.

Numbers are kept in international form: a leading "+" followed by 8 to 15
digits. Spaces, hyphens, dots and parentheses are dropped and a leading
"00" trunk prefix becomes "+".
"""

import re

from protean.exceptions import ValidationError

_SEPARATORS = re.compile(r"[\s\-().]")
_INTERNATIONAL = re.compile(r"^\+[1-9]\d{7,14}$")


def normalize_phone(raw: str) -> str:
    number = _SEPARATORS.sub("", raw or "")
    if number.startswith("00"):
        number = "+" + number[2:]
    elif number and not number.startswith("+"):
        number = "+" + number

    if not _INTERNATIONAL.match(number):
        raise ValidationError({"phone": [f"Invalid phone number: {raw!r}"]})
    return number
