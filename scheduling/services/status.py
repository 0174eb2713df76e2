"""
Appointment status rules.

The lifecycle is ``scheduled -> in_consultation -> completed`` with
``scheduled`` also able to end in ``cancelled`` or ``no_show``.  Which
edges a user may take depends on their position:

* nurses may set any status, except that a cancelled appointment stays
  cancelled;
* doctors may start, complete or mark as no-show their own
  appointments only.

Queue ordering rules for doctors (only the next patient may be started)
are enforced by :mod:`scheduling.services.appointments` since they need
the rest of the day's queue.
"""
from __future__ import annotations

from typing import Optional

from scheduling.models import Appointment

SCHEDULED = Appointment.STATUS_SCHEDULED
IN_CONSULTATION = Appointment.STATUS_IN_CONSULTATION
COMPLETED = Appointment.STATUS_COMPLETED
CANCELLED = Appointment.STATUS_CANCELLED
NO_SHOW = Appointment.STATUS_NO_SHOW

ALL_STATUSES = tuple(s for s, _ in Appointment.STATUS_CHOICES)

TRANSITIONS = {
    SCHEDULED: [IN_CONSULTATION, CANCELLED, NO_SHOW],
    IN_CONSULTATION: [COMPLETED],
    COMPLETED: [],
    CANCELLED: [],
    NO_SHOW: [],
}

DOCTOR_TRANSITIONS = {
    SCHEDULED: [IN_CONSULTATION, NO_SHOW],
    IN_CONSULTATION: [COMPLETED],
}


def can_transition(current: str, new: str) -> bool:
    """Return True if the lifecycle has an edge from ``current`` to ``new``."""
    return new in TRANSITIONS.get(current, [])


def allowed_statuses(position: Optional[str], appointment: Appointment, doctor_id=None) -> list[str]:
    """Statuses a user with ``position`` may move ``appointment`` to.

    ``doctor_id`` is the doctor record linked to the acting user and is
    only consulted for doctors.
    """
    current = appointment.status
    if position == 'nurse':
        if current == CANCELLED:
            return []
        return [s for s in ALL_STATUSES if s != current]
    if position == 'doctor':
        if not doctor_id or appointment.doctor_id != doctor_id:
            return []
        return [s for s in DOCTOR_TRANSITIONS.get(current, []) if can_transition(current, s)]
    return []


def may_set_status(position: Optional[str], appointment: Appointment, new_status: str, doctor_id=None) -> bool:
    return new_status in allowed_statuses(position, appointment, doctor_id)


def status_label(status: str) -> str:
    return dict(Appointment.STATUS_CHOICES).get(status, status)
