"""Sandbox ("demo") enterprise data transformation."""
from typing import List

from registrant_reports.models.record import Field, Row, field_index
from registrant_reports.models.tenant import TenantConfig

DEMO_ORGANIZATION_SUFFIX = " Demo"


def demo_organization_name(name: str) -> str:
    """Append the demo suffix to an organization name unless already present."""
    organization = name.strip()
    if not organization or organization.endswith(DEMO_ORGANIZATION_SUFFIX):
        return organization
    return organization + DEMO_ORGANIZATION_SUFFIX


def apply_demo_transform(rows: List[Row]) -> List[Row]:
    """
    Rewrite the Organization cell of every row for the demo enterprise.

    Rows are copied, never mutated in place. Applying the transform to
    already-transformed rows returns equal rows.
    """
    position = field_index(Field.ORGANIZATION)
    transformed = []
    for row in rows:
        new_row = list(row)
        if position < len(new_row) and new_row[position]:
            new_row[position] = demo_organization_name(new_row[position])
        transformed.append(new_row)
    return transformed


def transform_for_tenant(tenant: TenantConfig, rows: List[Row]) -> List[Row]:
    """Apply the demo transform only when the enterprise is the sandbox."""
    if not tenant.is_demo:
        return rows
    return apply_demo_transform(rows)
