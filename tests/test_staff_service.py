"""
Tests for staff management and login.
"""

import asyncio

import pytest
from conftest import MONDAY, at

from hospital.core.exceptions import ConflictError, NotFoundError, ParseError
from hospital.core.security import decode_access_token, hash_password, verify_password
from hospital.models.staff import Doctor, Nurse, StaffCreate, StaffUpdate, WeeklyAvailability
from hospital.services import staff_service
from hospital.services.auth_service import login_staff


def _doctor_create(email: str = "house@hospital.test") -> StaffCreate:
    return StaffCreate(
        role="doctor",
        email=email,
        password="vicodin-free",
        first_name="Gregory",
        last_name="House",
        department="diagnostics",
        specialization="nephrology",
        availability=[{"day": "monday", "start_time": "09:00", "end_time": "17:00"}],
    )


class TestCreateStaff:
    def test_creates_doctor_with_availability(self, repo):
        member = asyncio.run(staff_service.create_staff(repo, _doctor_create()))
        assert isinstance(member, Doctor)
        assert [w.day for w in member.availability] == ["monday"]
        assert repo.staff[member.id].hashed_password != "vicodin-free"

    def test_duplicate_email(self, repo):
        asyncio.run(staff_service.create_staff(repo, _doctor_create()))
        with pytest.raises(ConflictError):
            asyncio.run(staff_service.create_staff(repo, _doctor_create()))

    def test_get_unknown(self, repo):
        with pytest.raises(NotFoundError):
            asyncio.run(staff_service.get_staff(repo, 99))

    def test_get_nurse(self, repo):
        nurse = repo.add_staff("nurse", shift="night")
        member = asyncio.run(staff_service.get_staff(repo, nurse.id))
        assert isinstance(member, Nurse)
        assert member.shift == "night"


class TestDoctorAvailability:
    def test_replace_windows(self, repo):
        doctor = repo.add_doctor({"monday": ("09:00", "17:00")})
        windows = [
            WeeklyAvailability(day="friday", start_time="08:00", end_time="12:00"),
            WeeklyAvailability(day="tuesday", start_time="13:00", end_time="18:00"),
        ]
        updated = asyncio.run(staff_service.update_doctor_availability(repo, doctor.id, windows))
        assert [(w.day, w.start_time) for w in updated] == [("tuesday", "13:00"), ("friday", "08:00")]

    def test_duplicate_days(self, repo):
        doctor = repo.add_doctor({"monday": ("09:00", "17:00")})
        windows = [
            WeeklyAvailability(day="monday", start_time="08:00", end_time="10:00"),
            WeeklyAvailability(day="monday", start_time="12:00", end_time="14:00"),
        ]
        with pytest.raises(ParseError):
            asyncio.run(staff_service.update_doctor_availability(repo, doctor.id, windows))
        assert "replace_availability" not in repo.calls

    def test_not_a_doctor(self, repo):
        nurse = repo.add_staff("nurse")
        with pytest.raises(NotFoundError):
            asyncio.run(staff_service.get_doctor_availability(repo, nurse.id))


class TestLogin:
    def test_valid_credentials(self, repo):
        staff = repo.add_staff("admin", hashed_password=hash_password("correct-horse"))
        result = asyncio.run(login_staff(repo, staff.email, "correct-horse"))
        assert result is not None
        _, token, expires_in = result
        claims = decode_access_token(token)
        assert claims.user_id == str(staff.id)
        assert claims.role == "admin"
        assert expires_in > 0

    def test_wrong_password(self, repo):
        staff = repo.add_staff("admin", hashed_password=hash_password("correct-horse"))
        assert asyncio.run(login_staff(repo, staff.email, "battery-staple")) is None

    def test_role_mismatch(self, repo):
        staff = repo.add_staff("nurse", hashed_password=hash_password("correct-horse"))
        assert asyncio.run(login_staff(repo, staff.email, "correct-horse", role="doctor")) is None

    def test_garbage_token(self):
        assert decode_access_token("not.a.token") is None


class TestListStaff:
    def test_all_and_by_role(self, repo):
        doctor = repo.add_doctor({"monday": ("09:00", "17:00")})
        nurse = repo.add_staff("nurse")
        everyone = asyncio.run(staff_service.list_staff(repo))
        nurses = asyncio.run(staff_service.list_staff(repo, role="nurse"))
        assert [m.id for m in everyone] == [doctor.id, nurse.id]
        assert [m.id for m in nurses] == [nurse.id]

    def test_by_department(self, repo):
        cardio = repo.add_staff("nurse", department="cardiology")
        repo.add_staff("nurse", department="oncology")
        members = asyncio.run(staff_service.list_staff_by_department(repo, "cardiology"))
        assert [m.id for m in members] == [cardio.id]

    def test_empty_department(self, repo):
        with pytest.raises(NotFoundError):
            asyncio.run(staff_service.list_staff_by_department(repo, "radiology"))


class TestUpdateStaff:
    def test_changes_common_and_role_fields(self, repo):
        doctor = repo.add_doctor({"monday": ("09:00", "17:00")})
        member = asyncio.run(
            staff_service.update_staff(repo, doctor.id, StaffUpdate(last_name="Quinn", specialization="oncology"))
        )
        assert member.last_name == "Quinn"
        assert member.specialization == "oncology"
        assert [w.day for w in member.availability] == ["monday"]

    def test_new_password_is_hashed(self, repo):
        admin = repo.add_staff("admin")
        asyncio.run(staff_service.update_staff(repo, admin.id, StaffUpdate(password="new-secret-1")))
        assert verify_password("new-secret-1", repo.staff[admin.id].hashed_password)

    def test_field_of_another_role(self, repo):
        nurse = repo.add_staff("nurse")
        with pytest.raises(ParseError):
            asyncio.run(staff_service.update_staff(repo, nurse.id, StaffUpdate(specialization="surgery")))
        assert "update_staff" not in repo.calls

    def test_clearing_a_required_field(self, repo):
        doctor = repo.add_doctor()
        with pytest.raises(ParseError):
            asyncio.run(staff_service.update_staff(repo, doctor.id, StaffUpdate(specialization=None)))

    def test_email_taken(self, repo):
        first = repo.add_staff("admin")
        second = repo.add_staff("admin")
        with pytest.raises(ConflictError):
            asyncio.run(staff_service.update_staff(repo, second.id, StaffUpdate(email=first.email)))

    def test_nurse_shift(self, repo):
        nurse = repo.add_staff("nurse")
        member = asyncio.run(staff_service.update_nurse_shift(repo, nurse.id, "night"))
        assert member.shift == "night"

    def test_shift_for_non_nurse(self, repo):
        admin = repo.add_staff("admin")
        with pytest.raises(NotFoundError):
            asyncio.run(staff_service.update_nurse_shift(repo, admin.id, "night"))


class TestDeleteStaff:
    def test_doctor_takes_bookings_along(self, repo):
        doctor = repo.add_doctor({"monday": ("09:00", "17:00")})
        other = repo.add_doctor({"monday": ("09:00", "17:00")})
        repo.add_appointment(doctor.id, at(MONDAY, "10:00"))
        kept = repo.add_appointment(other.id, at(MONDAY, "10:00"))

        asyncio.run(staff_service.delete_staff(repo, doctor.id))

        assert doctor.id not in repo.staff
        assert doctor.id not in repo.availability
        assert repo.appointments == [kept]

    def test_unknown(self, repo):
        with pytest.raises(NotFoundError):
            asyncio.run(staff_service.delete_staff(repo, 99))
