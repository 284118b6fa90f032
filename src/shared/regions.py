"""Region classification used by VAT, compliance and approval rules."""

UAE = "UAE"
REST_OF_WORLD = "ROW"

_UAE_ALIASES = frozenset({"UAE", "AE", "UNITED ARAB EMIRATES"})


def is_uae(country) -> bool:
    if not country:
        return False
    return " ".join(str(country).upper().split()) in _UAE_ALIASES


def classify_region(country) -> str:
    return UAE if is_uae(country) else REST_OF_WORLD
