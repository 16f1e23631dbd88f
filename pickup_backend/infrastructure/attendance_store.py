"""
In-memory attendance/profile store. Stand-in for the time_cards and profiles tables.
"""

from datetime import date
from typing import Dict, List

from pickup_backend.domain.models import AttendanceRecord, Profile


class InMemoryAttendanceStore:
    def __init__(self) -> None:
        self._profiles: Dict[str, Dict[str, Profile]] = {}
        self._records: Dict[str, List[AttendanceRecord]] = {}

    def add_profile(self, venue_id: str, profile: Profile) -> None:
        self._profiles.setdefault(venue_id, {})[profile.profile_id] = profile

    def add_record(self, venue_id: str, record: AttendanceRecord) -> None:
        self._records.setdefault(venue_id, []).append(record)

    def profiles(self, venue_id: str) -> List[Profile]:
        return list(self._profiles.get(venue_id, {}).values())

    def records_between(self, venue_id: str, start: date, end: date) -> List[AttendanceRecord]:
        """Time cards whose calendar work_date is in [start, end]."""
        return [r for r in self._records.get(venue_id, []) if start <= r.work_date <= end]

    def clear(self) -> None:
        self._profiles.clear()
        self._records.clear()


ATTENDANCE_STORE = InMemoryAttendanceStore()
