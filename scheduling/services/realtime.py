import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

logger = logging.getLogger(__name__)

APPOINTMENTS_GROUP = "appointments"

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


def appointment_event(appointment, event: str) -> dict:
    """Build the change notification sent for ``appointment``.

    Only identifiers travel over the socket; dashboards re-fetch their
    own filtered view through the HTTP API.
    """
    return {
        "type": "appointments.changed",
        "event": event,
        "id": str(appointment.pk),
        "doctorId": str(appointment.doctor_id),
        "date": appointment.appointment_date.isoformat() if appointment.appointment_date else None,
    }


def send_appointment_event(payload: dict) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    try:
        async_to_sync(channel_layer.group_send)(APPOINTMENTS_GROUP, payload)
    except Exception:
        logger.exception("failed to broadcast %s for appointment %s", payload["event"], payload["id"])


def broadcast_appointment_change(appointment, event: str) -> None:
    """Queue a change notification that is sent once the surrounding transaction commits.

    The payload is built immediately; after a delete the instance no
    longer carries its primary key.
    """
    payload = appointment_event(appointment, event)
    transaction.on_commit(lambda: send_appointment_event(payload))
