"""Filter and aggregation engine for dashboard and rollup report views.

Every report view is derived from cached rows through the functions in this
module, so the dashboard, the reports page and the admin summary agree on what
counts as an enrollment or a certificate.

Dashboard views cover one organization over the whole dataset. Rollup views
cover every organization over a date range and depend on the enrollment mode.
"""
import logging
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional, Sequence

from registrant_reports.models.record import Field, Row, get_field
from registrant_reports.models.report import (
    CertificateEarner,
    EnrolledParticipant,
    EnrollmentMode,
    EnrollmentSummaryRow,
    GroupCounts,
    InvitedParticipant,
    OrgDashboard,
    OrganizationCounts,
    ReportTables,
    SystemwideRollup,
)
from registrant_reports.models.report_date import ReportDate
from registrant_reports.models.tenant import organization_to_group
from registrant_reports.utils.abbreviation import abbreviate_organization_name
from registrant_reports.utils.date_utils import in_range, is_cohort_year_in_range

logger = logging.getLogger(__name__)

NOT_ENROLLED = "-"
CLOSED = "closed"
YES = "Yes"


def _strcmp(a: str, b: str) -> int:
    return (a > b) - (a < b)


def _sort_by_columns(items: list, descending: Sequence[str], ascending: Sequence[str]) -> list:
    """Stable sort on string attributes: the descending keys first, then the ascending ones."""

    def compare(a, b) -> int:
        for attr in descending:
            diff = _strcmp(getattr(b, attr), getattr(a, attr))
            if diff:
                return diff
        for attr in ascending:
            diff = _strcmp(getattr(a, attr), getattr(b, attr))
            if diff:
                return diff
        return 0

    return sorted(items, key=cmp_to_key(compare))


def has_enrollment(row: Row) -> bool:
    """Enrolled cell is neither blank nor "-"."""
    enrolled = get_field(row, Field.ENROLLED)
    return bool(enrolled) and enrolled != NOT_ENROLLED


def _rows_for_organization(rows: Iterable[Row], organization: str) -> List[Row]:
    return [row for row in rows if get_field(row, Field.ORGANIZATION) == organization]


# Dashboard views

def build_enrollment_summary(rows: Iterable[Row], organization: str) -> List[EnrollmentSummaryRow]:
    """
    Enrollment counts per Cohort-Year for one organization.

    Only rows with a Cohort, a Year and an enrollment are grouped.
    Sort: Year descending, then Cohort descending (string comparison).
    """
    grouped: Dict[str, EnrollmentSummaryRow] = {}

    for row in _rows_for_organization(rows, organization):
        cohort = get_field(row, Field.COHORT)
        year = get_field(row, Field.YEAR)
        if not cohort or not year or not has_enrollment(row):
            continue

        key = f"{cohort}-{year}"
        if key not in grouped:
            grouped[key] = EnrollmentSummaryRow(cohort=cohort, year=year)

        summary = grouped[key]
        summary.enrollments += 1
        if get_field(row, Field.COMPLETED) == YES:
            summary.completed += 1
        if get_field(row, Field.CERTIFICATE) == YES:
            summary.certificates += 1

    return _sort_by_columns(list(grouped.values()), ("year", "cohort"), ())


def build_enrolled_participants(rows: Iterable[Row], organization: str) -> List[EnrolledParticipant]:
    """
    Participants still open for an organization (DaysToClose set and not "closed").

    Sort: Year desc, Cohort desc, Last asc, First asc.
    """
    participants = []
    for row in _rows_for_organization(rows, organization):
        days_to_close = get_field(row, Field.DAYS_TO_CLOSE)
        if not days_to_close or days_to_close == CLOSED:
            continue
        participants.append(EnrolledParticipant(
            days_to_close=days_to_close,
            cohort=get_field(row, Field.COHORT),
            year=get_field(row, Field.YEAR),
            first=get_field(row, Field.FIRST),
            last=get_field(row, Field.LAST),
            email=get_field(row, Field.EMAIL),
            completed=get_field(row, Field.COMPLETED) == YES,
            certificate=get_field(row, Field.CERTIFICATE) == YES,
        ))
    return _sort_by_columns(participants, ("year", "cohort"), ("last", "first"))


def build_invited_participants(rows: Iterable[Row], organization: str) -> List[InvitedParticipant]:
    """
    Invitees of an organization who have not enrolled (Enrolled blank or "-").

    Sort: Year desc, Cohort desc, Invited desc, Last asc, First asc. Invited is
    compared as the raw MM-DD-YY string, which is not chronological across
    years; this matches the published report ordering.
    """
    invited = []
    for row in _rows_for_organization(rows, organization):
        if has_enrollment(row):
            continue
        invited.append(InvitedParticipant(
            invited=get_field(row, Field.INVITED),
            cohort=get_field(row, Field.COHORT),
            year=get_field(row, Field.YEAR),
            first=get_field(row, Field.FIRST),
            last=get_field(row, Field.LAST),
            email=get_field(row, Field.EMAIL),
        ))
    return _sort_by_columns(invited, ("year", "cohort", "invited"), ("last", "first"))


def build_certificates_earned(rows: Iterable[Row], organization: str) -> List[CertificateEarner]:
    """
    Certificate earners of an organization.

    Sort: Year desc, Cohort desc, Last asc, First asc.
    """
    earners = [
        CertificateEarner(
            cohort=get_field(row, Field.COHORT),
            year=get_field(row, Field.YEAR),
            first=get_field(row, Field.FIRST),
            last=get_field(row, Field.LAST),
            email=get_field(row, Field.EMAIL),
        )
        for row in _rows_for_organization(rows, organization)
        if get_field(row, Field.CERTIFICATE) == YES
    ]
    return _sort_by_columns(earners, ("year", "cohort"), ("last", "first"))


def build_org_dashboard(rows: List[Row], organization: str, as_of: Optional[str] = None) -> OrgDashboard:
    """All four dashboard tables for one organization, all-time."""
    return OrgDashboard(
        organization=organization,
        enrollment_summary=build_enrollment_summary(rows, organization),
        enrolled=build_enrolled_participants(rows, organization),
        invited=build_invited_participants(rows, organization),
        certificates_earned=build_certificates_earned(rows, organization),
        as_of_timestamp=as_of,
    )


# Range filters

def is_enrolled_in_range(row: Row, start: str, end: str, mode: EnrollmentMode) -> bool:
    """
    Decide whether a registrant enrolled within [start, end].

    tou_completion: Enrolled holds a valid date inside the range.
    registration_date: Submitted is a valid date inside the range and the
    registrant has an enrollment.
    """
    start_date = ReportDate.parse(start)
    end_date = ReportDate.parse(end)
    if start_date is None or end_date is None:
        return False

    if mode is EnrollmentMode.TOU_COMPLETION:
        enrolled_on = ReportDate.parse(get_field(row, Field.ENROLLED))
        return enrolled_on is not None and enrolled_on.within(start_date, end_date)

    if mode is EnrollmentMode.REGISTRATION_DATE:
        submitted_on = ReportDate.parse(get_field(row, Field.SUBMITTED))
        return (
            submitted_on is not None
            and submitted_on.within(start_date, end_date)
            and has_enrollment(row)
        )

    raise ValueError(f"Unknown enrollment mode: {mode!r}")


def filter_registrations(rows: Iterable[Row], start: str, end: str) -> List[Row]:
    """Submissions whose Submitted date is within range."""
    return [row for row in rows if in_range(get_field(row, Field.SUBMITTED), start, end)]


def filter_enrollments(rows: Iterable[Row], start: str, end: str, mode: EnrollmentMode) -> List[Row]:
    """Registrants enrolled within range under the given mode."""
    return [row for row in rows if is_enrolled_in_range(row, start, end, mode)]


def filter_cohort_enrollments(rows: Iterable[Row], start: str, end: str) -> List[Row]:
    """Enrolled registrants whose Cohort-Year falls within the range's months."""
    return [
        row for row in rows
        if has_enrollment(row)
        and is_cohort_year_in_range(get_field(row, Field.COHORT), get_field(row, Field.YEAR), start, end)
    ]


def filter_certificates(rows: Iterable[Row], start: str, end: str) -> List[Row]:
    """Certificate earners whose Issued date is within range."""
    return [
        row for row in rows
        if get_field(row, Field.CERTIFICATE) == YES and in_range(get_field(row, Field.ISSUED), start, end)
    ]


# Rollups

def _count_by_organization(rows: Iterable[Row]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for row in rows:
        organization = get_field(row, Field.ORGANIZATION)
        counts[organization] = counts.get(organization, 0) + 1
    return counts


def build_systemwide_rollup(registrations: List[Row], enrollments: List[Row], certificates: List[Row],
                            mode: EnrollmentMode) -> SystemwideRollup:
    return SystemwideRollup(
        registrations_count=len(registrations),
        enrollments_count=len(enrollments),
        certificates_count=len(certificates),
        enrollment_mode=EnrollmentMode.parse(mode).value,
    )


def build_organizations_rollup(organizations: Sequence[str], registrations: List[Row],
                               enrollments: List[Row], certificates: List[Row]) -> List[OrganizationCounts]:
    """
    Per-organization counts over already filtered rows.

    Every configured organization appears, including those with no rows.
    Organizations present in the data but missing from configuration are
    appended so the column totals equal the systemwide counts. Rows with an
    empty Organization are grouped under "". Sorted case-insensitively.
    """
    registration_counts = _count_by_organization(registrations)
    enrollment_counts = _count_by_organization(enrollments)
    certificate_counts = _count_by_organization(certificates)

    names = list(dict.fromkeys(organizations))
    known = set(names)
    for counts in (registration_counts, enrollment_counts, certificate_counts):
        for name in counts:
            if name not in known:
                logger.warning(f"Organization {name!r} found in data but not in configuration")
                names.append(name)
                known.add(name)

    rollup = [
        OrganizationCounts(
            organization=name,
            registrations=registration_counts.get(name, 0),
            enrollments=enrollment_counts.get(name, 0),
            certificates=certificate_counts.get(name, 0),
            organization_display=abbreviate_organization_name(name),
        )
        for name in names
    ]
    rollup.sort(key=lambda item: (item.organization.lower(), item.organization))
    return rollup


def build_groups_rollup(groups: Dict[str, List[str]], registrations: List[Row],
                        enrollments: List[Row], certificates: List[Row]) -> List[GroupCounts]:
    """
    Per-group counts, summed over member organizations.

    Groups keep their declaration order. Organizations that belong to no group
    are not counted anywhere in this view.
    """
    if not groups:
        return []

    lookup = organization_to_group(groups)

    def count_for(rows: List[Row]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for organization, total in _count_by_organization(rows).items():
            group = lookup.get(organization)
            if group is not None:
                counts[group] = counts.get(group, 0) + total
        return counts

    registration_counts = count_for(registrations)
    enrollment_counts = count_for(enrollments)
    certificate_counts = count_for(certificates)

    return [
        GroupCounts(
            group=group,
            registrations=registration_counts.get(group, 0),
            enrollments=enrollment_counts.get(group, 0),
            certificates=certificate_counts.get(group, 0),
        )
        for group in groups
    ]


def build_all_tables(registrants: List[Row], registrations: List[Row], certificates: List[Row],
                        start: str, end: str, mode: EnrollmentMode,
                        organizations: Sequence[str], groups: Optional[Dict[str, List[str]]] = None,
                        range_basis: str = "date") -> ReportTables:
    """
    Build systemwide, organization and group rollups from one filtering pass.

    Args:
        registrants: Raw registrants snapshot (enrollments are filtered from it)
        registrations: Derived registrations snapshot (all submissions)
        certificates: Derived certificates snapshot
        start: Range start, MM-DD-YY
        end: Range end, MM-DD-YY
        mode: Enrollment mode
        organizations: Configured organization names
        groups: Optional group → organizations mapping
        range_basis: "date" or "cohort"; cohort filters enrollments by Cohort-Year

    Returns:
        ReportTables whose organization and group totals reconcile with systemwide
    """
    mode = EnrollmentMode.parse(mode)
    filtered_registrations = filter_registrations(registrations, start, end)
    if range_basis == "cohort":
        filtered_enrollments = filter_cohort_enrollments(registrants, start, end)
    else:
        filtered_enrollments = filter_enrollments(registrants, start, end, mode)
    filtered_certificates = filter_certificates(certificates, start, end)

    logger.debug(
        f"Filtered {start}..{end} ({mode.value}, {range_basis}): "
        f"{len(filtered_registrations)} registrations, {len(filtered_enrollments)} enrollments, "
        f"{len(filtered_certificates)} certificates"
    )

    return ReportTables(
        systemwide=build_systemwide_rollup(
            filtered_registrations, filtered_enrollments, filtered_certificates, mode
        ),
        organizations=build_organizations_rollup(
            organizations, filtered_registrations, filtered_enrollments, filtered_certificates
        ),
        groups=build_groups_rollup(
            groups or {}, filtered_registrations, filtered_enrollments, filtered_certificates
        ),
    )
