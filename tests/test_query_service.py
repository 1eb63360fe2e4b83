from datetime import datetime, timedelta

import pytest

from clinic_api.models.appointment import Appointment
from clinic_api.models.clinician import Clinician
from clinic_api.models.patient import Patient
from clinic_api.schemas.appointment import DateRange

from .conftest import NOW, booking

def seed(session, *rows):
    """Insert appointments directly, including ones already in the past."""
    for clinician_id in {row[0] for row in rows}:
        session.add(Clinician(id=clinician_id, name=f"Dr. {clinician_id}"))
    session.add(Patient(id="P", name="Patient P"))
    for clinician_id, start, end in rows:
        session.add(Appointment(clinician_id=clinician_id, patient_id="P", start_time=start, end_time=end))
    session.commit()

DEC_1 = (datetime(2025, 12, 1, 10), datetime(2025, 12, 1, 11))
DEC_2 = (datetime(2025, 12, 2, 10), datetime(2025, 12, 2, 11))
PAST = (NOW - timedelta(days=2), NOW - timedelta(days=2) + timedelta(hours=1))

class TestClinicianListing:

    def test_range_filter_returns_only_matching_day(self, db_session, query_service):
        seed(db_session, ("C", *DEC_1), ("C", *DEC_2))

        results = query_service.list_appointments_for_clinician(
            "C", DateRange(from_time=datetime(2025, 12, 1), to_time=datetime(2025, 12, 1, 23, 59, 59))
        )

        assert [r.start_time for r in results] == [DEC_1[0]]

    def test_partial_overlap_with_range_is_included(self, db_session, query_service):
        seed(db_session, ("C", *DEC_1))

        # Range starts in the middle of the appointment
        results = query_service.list_appointments_for_clinician(
            "C", DateRange(from_time=datetime(2025, 12, 1, 10, 30))
        )
        assert len(results) == 1

        # Range ends in the middle of the appointment
        results = query_service.list_appointments_for_clinician(
            "C", DateRange(from_time=datetime(2025, 12, 1, 9), to_time=datetime(2025, 12, 1, 10, 30))
        )
        assert len(results) == 1

    def test_range_bounds_are_inclusive(self, db_session, query_service):
        seed(db_session, ("C", *DEC_1))

        ends_at_from = query_service.list_appointments_for_clinician(
            "C", DateRange(from_time=DEC_1[1])
        )
        starts_at_to = query_service.list_appointments_for_clinician(
            "C", DateRange(from_time=datetime(2025, 11, 30), to_time=DEC_1[0])
        )

        assert len(ends_at_from) == 1
        assert len(starts_at_to) == 1

    def test_default_excludes_past_appointments(self, db_session, query_service):
        seed(db_session, ("C", *PAST), ("C", *DEC_1))

        results = query_service.list_appointments_for_clinician("C")

        assert [r.start_time for r in results] == [DEC_1[0]]
        assert all(r.start_time >= NOW for r in results)

    def test_to_only_keeps_upcoming_default(self, db_session, query_service):
        seed(db_session, ("C", *PAST), ("C", *DEC_1), ("C", *DEC_2))

        results = query_service.list_appointments_for_clinician(
            "C", DateRange(to_time=datetime(2025, 12, 1, 23, 59, 59))
        )

        assert [r.start_time for r in results] == [DEC_1[0]]

    def test_explicit_from_includes_past(self, db_session, query_service):
        seed(db_session, ("C", *PAST), ("C", *DEC_1))

        results = query_service.list_appointments_for_clinician(
            "C", DateRange(from_time=NOW - timedelta(days=30))
        )

        assert [r.start_time for r in results] == [PAST[0], DEC_1[0]]

    def test_results_sorted_by_start(self, db_session, query_service):
        seed(db_session, ("C", *DEC_2), ("C", *DEC_1))

        results = query_service.list_appointments_for_clinician("C")

        assert [r.start_time for r in results] == [DEC_1[0], DEC_2[0]]

    def test_unknown_clinician_is_empty(self, db_session, query_service):
        seed(db_session, ("C", *DEC_1))

        assert query_service.list_appointments_for_clinician("nobody") == []

    def test_only_requested_clinician_returned(self, db_session, query_service):
        seed(db_session, ("C1", *DEC_1), ("C2", *DEC_1))

        results = query_service.list_appointments_for_clinician("C1")

        assert [r.clinician_id for r in results] == ["C1"]

class TestGlobalListing:

    def test_lists_every_clinician(self, db_session, query_service):
        seed(db_session, ("C1", *DEC_2), ("C2", *DEC_1))

        results = query_service.list_all_appointments()

        assert [r.clinician_id for r in results] == ["C2", "C1"]

    def test_global_default_excludes_past(self, db_session, query_service):
        seed(db_session, ("C1", *PAST), ("C2", *DEC_1))

        results = query_service.list_all_appointments()

        assert [r.clinician_id for r in results] == ["C2"]

    def test_global_range_filter(self, db_session, query_service):
        seed(db_session, ("C1", *DEC_1), ("C2", *DEC_2))

        results = query_service.list_all_appointments(
            DateRange(from_time=datetime(2025, 12, 2), to_time=datetime(2025, 12, 2, 23, 59, 59))
        )

        assert [r.clinician_id for r in results] == ["C2"]

class TestRoundTrip:

    @pytest.mark.parametrize("clinician_id", ["C", "clinician-with-dashes"])
    def test_booked_appointment_listed_once(self, booking_service, query_service, clinician_id):
        created = booking_service.create_appointment(booking(clinician_id=clinician_id))

        listed = query_service.list_appointments_for_clinician(clinician_id)

        assert [a.id for a in listed] == [created.id]
        assert listed[0] == created
