"""
Appointment booking and status services.

All writes go through here so that the conflict check, the status rules
and the transition history are applied the same way regardless of which
dashboard triggered them.  Booking takes a row lock on the doctor so the
conflict check and the insert cannot interleave with another booking
for the same doctor.
"""
from __future__ import annotations

import datetime
import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from scheduling.exceptions import TimeConflictError, TransitionNotAllowed
from scheduling.models import Appointment, AppointmentTransition, Doctor, Patient
from scheduling.permissions import DOCTOR, NURSE, get_profile, position_of
from scheduling.services.audit import log_action
from scheduling.services.conflicts import conflict_window, conflicting_appointments
from scheduling.services.status import (
    CANCELLED, COMPLETED, IN_CONSULTATION, SCHEDULED, may_set_status,
)

logger = logging.getLogger(__name__)


def check_appointment_access(user, appointment: Appointment) -> bool:
    position = position_of(user)
    if position == NURSE:
        return True
    if position == DOCTOR:
        return get_profile(user).doctor_id == appointment.doctor_id
    return False


def visible_appointments(user):
    """Appointments the user may read: all for nurses, their own for doctors."""
    qs = Appointment.objects.select_related('patient', 'doctor')
    position = position_of(user)
    if position == NURSE:
        return qs
    if position == DOCTOR:
        return qs.filter(doctor_id=get_profile(user).doctor_id)
    return qs.none()


def _lock_doctor(doctor_id) -> Doctor:
    return Doctor.objects.select_for_update().get(id=doctor_id)


def _ensure_no_conflict(doctor_id, appointment_date, appointment_time, exclude_id=None) -> None:
    conflicts = conflicting_appointments(doctor_id, appointment_date, appointment_time, exclude_id)
    if conflicts:
        logger.info(
            'time conflict for doctor %s on %s at %s (%d clashing)',
            doctor_id, appointment_date, appointment_time, len(conflicts),
        )
        raise TimeConflictError(conflicts, window=conflict_window())


def _record_status(appointment: Appointment, new_status: str, operator, reason: str = '') -> None:
    old_status = appointment.status
    now = timezone.now()
    appointment.status = new_status
    if new_status == IN_CONSULTATION:
        appointment.started_at = now
    if new_status == COMPLETED:
        appointment.completed_at = now
    AppointmentTransition.objects.create(
        appointment=appointment,
        from_status=old_status,
        to_status=new_status,
        operator=operator if getattr(operator, 'pk', None) else None,
        reason=reason,
    )


def create_patient(user, *, first_name: str, phone: str, last_name: str = '', age: Optional[int] = None,
                   telegram_id: Optional[str] = None) -> Patient:
    if position_of(user) != NURSE:
        raise PermissionDenied('only nurses can register patients')
    patient = Patient.objects.create(
        first_name=first_name,
        last_name=last_name or '',
        phone=phone,
        age=age,
        telegram_id=telegram_id or None,
    )
    log_action(user=user, action='patient_create', object_type='patient', object_id=patient.id)
    return patient


@transaction.atomic
def create_appointment(user, *, doctor_id, appointment_date: datetime.date, appointment_time: datetime.time,
                       complaint: str, patient_id=None, new_patient: Optional[dict] = None,
                       telegram_id: Optional[str] = None) -> Appointment:
    """Book a new appointment, registering the patient first when ``new_patient`` is given.

    Raises :class:`TimeConflictError` before anything is written when the
    doctor already has an active appointment too close to the slot.
    """
    if position_of(user) != NURSE:
        raise PermissionDenied('only nurses can create appointments')
    doctor = _lock_doctor(doctor_id)
    _ensure_no_conflict(doctor.id, appointment_date, appointment_time)

    if new_patient:
        patient = create_patient(user, **new_patient)
    else:
        patient = Patient.objects.get(id=patient_id)

    appointment = Appointment(
        patient=patient,
        doctor=doctor,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        complaint=complaint,
        telegram_id=telegram_id or patient.telegram_id,
        status=SCHEDULED,
    )
    appointment.save()
    AppointmentTransition.objects.create(
        appointment=appointment, from_status=None, to_status=SCHEDULED, operator=user, reason='created',
    )
    log_action(user=user, action='appointment_create', object_type='appointment', object_id=appointment.id,
               detail={'doctorId': str(doctor.id), 'date': appointment_date.isoformat()})
    return appointment


@transaction.atomic
def update_appointment(user, appointment_id, *, doctor_id, appointment_date: datetime.date,
                       appointment_time: datetime.time, status: str, complaint: Optional[str] = None) -> Appointment:
    """Nurse edit of doctor, slot, status and optionally the complaint.

    The conflict check skips the appointment being edited so that saving
    an unchanged slot never clashes with itself.
    """
    if position_of(user) != NURSE:
        raise PermissionDenied('only nurses can edit appointments')
    appointment = Appointment.objects.select_for_update().get(id=appointment_id)
    if appointment.status == CANCELLED:
        raise TransitionNotAllowed(CANCELLED, status, 'cancelled appointments cannot be edited')
    if status != appointment.status and not may_set_status(NURSE, appointment, status):
        raise TransitionNotAllowed(appointment.status, status)

    doctor = _lock_doctor(doctor_id)
    _ensure_no_conflict(doctor.id, appointment_date, appointment_time, exclude_id=appointment.id)

    appointment.doctor = doctor
    appointment.appointment_date = appointment_date
    appointment.appointment_time = appointment_time
    if complaint is not None:
        appointment.complaint = complaint
    if status != appointment.status:
        _record_status(appointment, status, user, reason='edited')
    appointment.save()
    log_action(user=user, action='appointment_update', object_type='appointment', object_id=appointment.id,
               detail={'doctorId': str(doctor.id), 'date': appointment_date.isoformat(), 'status': appointment.status})
    return appointment


def _check_doctor_can_start(appointment: Appointment) -> None:
    day = Appointment.objects.filter(
        doctor_id=appointment.doctor_id,
        appointment_date=appointment.appointment_date,
    ).exclude(id=appointment.id)
    if day.filter(status=IN_CONSULTATION).exists():
        raise TransitionNotAllowed(appointment.status, IN_CONSULTATION, 'another consultation is in progress')
    earlier = day.filter(status=SCHEDULED).filter(appointment_time__lt=appointment.appointment_time)
    if earlier.exists():
        raise TransitionNotAllowed(
            appointment.status, IN_CONSULTATION, 'only the next patient in the queue can be started'
        )


@transaction.atomic
def change_status(user, appointment_id, new_status: str, reason: str = '') -> Appointment:
    """Apply a status change for a nurse or a doctor.

    Raises ``Appointment.DoesNotExist``, ``PermissionDenied`` when the
    user may not touch the appointment and :class:`TransitionNotAllowed`
    when the change is outside what their position allows.
    """
    appointment = Appointment.objects.select_for_update().get(id=appointment_id)
    if not check_appointment_access(user, appointment):
        raise PermissionDenied('forbidden for this appointment')
    position = position_of(user)
    doctor_id = get_profile(user).doctor_id
    if not may_set_status(position, appointment, new_status, doctor_id):
        logger.info('rejected %s -> %s by %s for %s', appointment.status, new_status, position, appointment.pk)
        raise TransitionNotAllowed(appointment.status, new_status)
    if position == DOCTOR and new_status == IN_CONSULTATION:
        _check_doctor_can_start(appointment)
    _record_status(appointment, new_status, user, reason=reason)
    appointment.save(update_fields=['status', 'started_at', 'completed_at', 'updated_at'])
    return appointment


def start_consultation(user, appointment_id) -> Appointment:
    return change_status(user, appointment_id, IN_CONSULTATION, reason='consultation started')


def complete_consultation(user, appointment_id) -> Appointment:
    return change_status(user, appointment_id, COMPLETED, reason='consultation completed')


def mark_no_show(user, appointment_id) -> Appointment:
    return change_status(user, appointment_id, Appointment.STATUS_NO_SHOW, reason='patient did not attend')


def cancel_appointment(user, appointment_id) -> Appointment:
    return change_status(user, appointment_id, CANCELLED, reason='cancelled')
