"""Registrant record schema.

Registrants and submissions sheets share one fixed 17-column layout. Call
sites address cells by field name, never by position.
"""
from enum import Enum
from typing import Any, List, Sequence, Union


class Field(Enum):
    """Logical column names, in sheet order."""

    DAYS_TO_CLOSE = "DaysToClose"
    INVITED = "Invited"
    ENROLLED = "Enrolled"
    COHORT = "Cohort"
    YEAR = "Year"
    FIRST = "First"
    LAST = "Last"
    EMAIL = "Email"
    ROLE = "Role"
    ORGANIZATION = "Organization"
    CERTIFICATE = "Certificate"
    ISSUED = "Issued"
    CLOSING_DATE = "ClosingDate"
    COMPLETED = "Completed"
    ID = "ID"
    SUBMITTED = "Submitted"
    STATUS = "Status"


FIELD_COUNT = len(Field)

_FIELD_POSITIONS = {member: position for position, member in enumerate(Field)}

Row = List[str]


def field_index(name: Union[Field, str]) -> int:
    """
    Map a field to its zero-based column position.

    Args:
        name: Field member or its logical name (e.g., "Organization")

    Returns:
        int: Column position 0..16

    Raises:
        KeyError: If the name is not a known field
    """
    if isinstance(name, Field):
        return _FIELD_POSITIONS[name]
    try:
        return _FIELD_POSITIONS[Field(name)]
    except ValueError:
        raise KeyError(f"Unknown registrant field: {name!r}") from None


def get_field(row: Sequence[Any], name: Union[Field, str]) -> str:
    """Read a cell by field name; missing trailing cells read as ""."""
    position = field_index(name)
    if position >= len(row):
        return ""
    value = row[position]
    return "" if value is None else str(value)


def normalize_row(row: Sequence[Any]) -> Row:
    """Stringify and whitespace-trim every cell of a sheet row."""
    return ["" if cell is None else str(cell).strip() for cell in row]
