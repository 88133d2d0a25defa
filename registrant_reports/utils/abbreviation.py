"""Organization display-name abbreviation."""
from typing import List, Tuple

# Most specific patterns first; only the first match is applied.
ABBREVIATION_RULES: List[Tuple[str, str]] = [
    ("Community College District", "CCD"),
    ("Junior College District", "JCD"),
    ("Community College", "CC"),
    ("Continuing Education", "Cont Ed"),
]


def abbreviate_organization_name(name: str) -> str:
    """
    Shorten an organization name for display.

    Args:
        name: Canonical organization name

    Returns:
        str: Name with the first matching rule applied once, or the name unchanged
    """
    for pattern, abbreviation in ABBREVIATION_RULES:
        if pattern in name:
            return name.replace(pattern, abbreviation, 1)
    return name
