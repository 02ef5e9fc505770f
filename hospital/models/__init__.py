from hospital.models.staff import (
    AdminStaff,
    Doctor,
    DoctorAvailability,
    EmergencyTeamMember,
    LabTechnician,
    Nurse,
    Staff,
    StaffCreate,
    StaffMember,
    WeeklyAvailability,
)
from hospital.models.appointment import Appointment, AppointmentCreate, AppointmentPublic, BookedInterval
from hospital.models.examination import Examination, ExaminationCreate, ExaminationPublic
from hospital.models.schedule import DoctorSchedule, TimeSlot

__all__ = [
    "AdminStaff",
    "Doctor",
    "DoctorAvailability",
    "EmergencyTeamMember",
    "LabTechnician",
    "Nurse",
    "Staff",
    "StaffCreate",
    "StaffMember",
    "WeeklyAvailability",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "BookedInterval",
    "Examination",
    "ExaminationCreate",
    "ExaminationPublic",
    "DoctorSchedule",
    "TimeSlot",
]
