import logging

import requests
from django.conf import settings

from scheduling.exceptions import NotificationError, WebhookNotConfigured
from scheduling.models import Appointment

logger = logging.getLogger(__name__)


def reschedule_payload(appointment: Appointment) -> dict:
    return {
        'doctor_name': appointment.doctor.full_name,
        'patient_first_name': appointment.patient.first_name,
        'patient_last_name': appointment.patient.last_name or '',
        'appointment_date': appointment.appointment_date.isoformat(),
        'appointment_time': appointment.appointment_time.strftime('%H:%M:%S'),
    }


def request_reschedule(appointment: Appointment) -> dict:
    """Ask the messaging webhook to contact the patient about a new slot.

    Returns the payload that was sent.  Any transport error or non-2xx
    answer raises :class:`NotificationError`.
    """
    url = settings.RESCHEDULE_WEBHOOK_URL
    if not url:
        raise WebhookNotConfigured('reschedule webhook is not configured')
    payload = reschedule_payload(appointment)
    try:
        r = requests.post(url, json=payload, timeout=settings.RESCHEDULE_WEBHOOK_TIMEOUT)
    except requests.RequestException as e:
        raise NotificationError(f'Failed to send reschedule request: {e}') from e
    if not 200 <= r.status_code < 300:
        raise NotificationError(f'Failed to send reschedule request: webhook answered {r.status_code}')
    logger.info('reschedule request sent for appointment %s', appointment.pk)
    return payload
