"""
Appointment conflict detection.

Two active appointments (scheduled or in consultation) for the same
doctor on the same day must start at least ``CONFLICT_WINDOW_MINUTES``
apart.  The check is run by the booking services before every insert or
edit; the store itself has no constraint for it.
"""
from __future__ import annotations

import datetime
from typing import Optional, Union

from django.conf import settings

from scheduling.models import Appointment

ACTIVE_STATUSES = (Appointment.STATUS_SCHEDULED, Appointment.STATUS_IN_CONSULTATION)

TimeLike = Union[datetime.time, str]


def conflict_window() -> int:
    return getattr(settings, 'CONFLICT_WINDOW_MINUTES', 30)


def time_to_minutes(value: TimeLike) -> int:
    """Minutes since midnight for a ``time`` or an ``"HH:MM[:SS]"`` string."""
    if isinstance(value, datetime.time):
        return value.hour * 60 + value.minute
    parts = str(value).strip().split(':')
    if len(parts) < 2:
        raise ValueError(f'invalid time: {value!r}')
    hours, minutes = int(parts[0]), int(parts[1])
    return hours * 60 + minutes


def is_too_close(a: TimeLike, b: TimeLike, window: Optional[int] = None) -> bool:
    window = conflict_window() if window is None else window
    return abs(time_to_minutes(a) - time_to_minutes(b)) < window


def conflicting_appointments(doctor_id, appointment_date: datetime.date, appointment_time: TimeLike,
                             exclude_id=None) -> list[Appointment]:
    """Return the doctor's active appointments on that date that clash with ``appointment_time``."""
    qs = Appointment.objects.filter(
        doctor_id=doctor_id,
        appointment_date=appointment_date,
        status__in=ACTIVE_STATUSES,
    )
    if exclude_id:
        qs = qs.exclude(id=exclude_id)
    window = conflict_window()
    return [
        a for a in qs.only('id', 'appointment_time').order_by('appointment_time')
        if is_too_close(a.appointment_time, appointment_time, window)
    ]


def has_time_conflict(doctor_id, appointment_date: datetime.date, appointment_time: TimeLike,
                      exclude_id=None) -> bool:
    return bool(conflicting_appointments(doctor_id, appointment_date, appointment_time, exclude_id))
