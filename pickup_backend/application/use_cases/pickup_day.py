"""
Pickup day use case. Builds the staff pickup board for one venue and business date. No FastAPI.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from pickup_backend.domain.business_date import business_date_span, resolve_record
from pickup_backend.domain.ledger import PickupAssignmentLedger
from pickup_backend.domain.models import AttendanceRecord, Attendee, DaySwitchBoundary, Profile

DRIVER_ROLES = {"staff", "admin", "partner"}


@dataclass
class PickupBoard:
    business_date: date
    ledger: PickupAssignmentLedger
    attendees: List[Attendee]
    staff_profiles: List[Profile]
    unassigned: List[Attendee]


def _start_time(record: AttendanceRecord, timezone: str) -> Optional[str]:
    if record.scheduled_start_time:
        return record.scheduled_start_time
    if record.clock_in is None:
        return None
    local = record.clock_in.astimezone(ZoneInfo(timezone)) if record.clock_in.tzinfo else record.clock_in
    return local.strftime("%H:%M")


def attendees_for_business_date(
    records: Sequence[AttendanceRecord],
    profiles: Sequence[Profile],
    business_date: date,
    boundary: DaySwitchBoundary,
    timezone: str,
) -> List[Attendee]:
    """
    Cast members with a time card on `business_date`. Records may come from both
    calendar dates of the span; each is re-resolved to its business date.
    """
    span = business_date_span(business_date, boundary)
    profile_by_id = {p.profile_id: p for p in profiles}
    attendees: List[Attendee] = []
    seen = set()
    for record in records:
        if not span.start_calendar_date <= record.work_date <= span.end_calendar_date:
            continue
        if resolve_record(record, boundary, timezone) != business_date:
            continue
        profile = profile_by_id.get(record.profile_id)
        if profile is None or profile.role != "cast" or record.profile_id in seen:
            continue
        seen.add(record.profile_id)
        attendees.append(
            Attendee(
                profile_id=record.profile_id,
                display_name=profile.display_name,
                pickup_destination=record.pickup_destination,
                start_time=_start_time(record, timezone),
            )
        )
    return attendees


def build_pickup_board(
    ledger: PickupAssignmentLedger,
    records: Sequence[AttendanceRecord],
    profiles: Sequence[Profile],
    boundary: DaySwitchBoundary,
    timezone: str,
) -> PickupBoard:
    attendees = attendees_for_business_date(
        records, profiles, ledger.business_date, boundary, timezone
    )
    return PickupBoard(
        business_date=ledger.business_date,
        ledger=ledger,
        attendees=attendees,
        staff_profiles=[p for p in profiles if p.role in DRIVER_ROLES],
        unassigned=ledger.unassigned_attendees(attendees),
    )
