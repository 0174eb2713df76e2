"""
Dashboard helpers.

Filtering and queue organisation are plain functions over an already
fetched list of appointments so that both dashboards apply exactly the
same predicates the nurse and doctor screens expect.  The ``format_*``
helpers build the JSON shapes returned by the views.
"""
from __future__ import annotations

import datetime
from typing import Iterable, Optional

from django.conf import settings

from scheduling.models import Appointment, Doctor, Patient
from scheduling.services.status import CANCELLED, COMPLETED, IN_CONSULTATION, SCHEDULED, status_label


def patient_display_name(patient: Optional[Patient]) -> str:
    if patient is None:
        return ''
    return f"{patient.first_name} {patient.last_name}"


def matches_doctor(appointment: Appointment, doctor_id) -> bool:
    if not doctor_id or str(doctor_id) == 'all':
        return True
    return str(appointment.doctor_id) == str(doctor_id)


def matches_date(appointment: Appointment, on_date: Optional[datetime.date]) -> bool:
    if on_date is None:
        return True
    return appointment.appointment_date == on_date


def matches_search(appointment: Appointment, query: Optional[str]) -> bool:
    """Case-insensitive substring match on the patient or doctor name."""
    if not query:
        return True
    needle = query.lower()
    patient_name = patient_display_name(appointment.patient).lower()
    doctor_name = (appointment.doctor.full_name if appointment.doctor else '').lower()
    return needle in patient_name or needle in doctor_name


def filter_appointments(appointments: Iterable[Appointment], *, doctor_id=None,
                        on_date: Optional[datetime.date] = None, query: Optional[str] = None,
                        include_cancelled: bool = False) -> list[Appointment]:
    return [
        a for a in appointments
        if (include_cancelled or a.status != CANCELLED)
        and matches_doctor(a, doctor_id)
        and matches_date(a, on_date)
        and matches_search(a, query)
    ]


def organize_queue(appointments: Iterable[Appointment], preview: Optional[int] = None) -> dict:
    """Split a doctor's day into the current patient, the waiting list and counters.

    ``appointments`` must already be ordered by time.  Only the first
    waiting appointment can be started, and only while nobody is in
    consultation.
    """
    preview = settings.DOCTOR_QUEUE_PREVIEW if preview is None else preview
    appointments = list(appointments)
    current = next((a for a in appointments if a.status == IN_CONSULTATION), None)
    waiting = [a for a in appointments if a.status == SCHEDULED]
    completed = sum(1 for a in appointments if a.status == COMPLETED)
    return {
        'current': current,
        'next': waiting[:preview],
        'startable_id': waiting[0].id if waiting and current is None else None,
        'waiting_count': len(waiting),
        'completed_count': completed,
    }


def mask_phone(phone: str) -> str:
    if not phone or len(phone) < 4:
        return phone
    return f"***-***-{phone[-4:]}"


def format_time(value: Optional[datetime.time]) -> Optional[str]:
    return value.strftime('%H:%M') if value else None


def format_doctor(doctor: Optional[Doctor]) -> Optional[dict]:
    if doctor is None:
        return None
    return {
        'id': str(doctor.id),
        'fullName': doctor.full_name,
        'email': doctor.email,
        'specialty': doctor.specialty or None,
    }


def format_patient(patient: Optional[Patient], *, masked: bool = False) -> Optional[dict]:
    if patient is None:
        return None
    return {
        'id': str(patient.id),
        'firstName': patient.first_name,
        'lastName': patient.last_name,
        'phone': mask_phone(patient.phone) if masked else patient.phone,
        'telegramId': patient.telegram_id,
        'age': patient.age,
    }


def format_appointment(appointment: Appointment, *, masked: bool = False) -> dict:
    return {
        'id': str(appointment.id),
        'patientId': str(appointment.patient_id),
        'doctorId': str(appointment.doctor_id),
        'date': appointment.appointment_date.isoformat(),
        'time': format_time(appointment.appointment_time),
        'complaint': appointment.complaint or None,
        'status': appointment.status,
        'statusLabel': status_label(appointment.status),
        'telegramId': appointment.telegram_id,
        'startedAt': appointment.started_at.isoformat() if appointment.started_at else None,
        'completedAt': appointment.completed_at.isoformat() if appointment.completed_at else None,
        'createdAt': appointment.created_at.isoformat() if appointment.created_at else None,
        'updatedAt': appointment.updated_at.isoformat() if appointment.updated_at else None,
        'patient': format_patient(appointment.patient, masked=masked),
        'doctor': format_doctor(appointment.doctor),
    }
