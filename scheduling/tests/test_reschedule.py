import datetime

import pytest
import requests
from rest_framework.test import APIClient

from scheduling.models import AuditEvent

pytestmark = pytest.mark.django_db

WEBHOOK = 'https://hooks.example.test/reschedule'


class _Resp:
    def __init__(self, status_code):
        self.status_code = status_code


@pytest.fixture
def appointment(doctor, make_appointment):
    return make_appointment(doctor, datetime.time(9, 5))


@pytest.fixture
def nurse_client(nurse_user):
    client = APIClient()
    client.force_authenticate(user=nurse_user)
    return client


def _request(client, appointment):
    return client.post('/api/appointments/request-reschedule', {'id': str(appointment.id)}, format='json')


def test_sends_payload_to_webhook(monkeypatch, settings, nurse_client, appointment):
    settings.RESCHEDULE_WEBHOOK_URL = WEBHOOK
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json, timeout))
        return _Resp(200)

    monkeypatch.setattr('scheduling.services.notify.requests.post', fake_post)
    resp = _request(nurse_client, appointment)

    assert resp.status_code == 200
    assert resp.data['detail'] == 'Reschedule request sent to patient via Telegram'
    url, payload, timeout = calls[0]
    assert url == WEBHOOK
    assert timeout == settings.RESCHEDULE_WEBHOOK_TIMEOUT
    assert payload == {
        'doctor_name': 'Dr. House',
        'patient_first_name': 'John',
        'patient_last_name': 'Smith',
        'appointment_date': '2026-03-02',
        'appointment_time': '09:05:00',
    }
    assert AuditEvent.objects.filter(action='reschedule_request', object_id=str(appointment.id)).exists()


def test_non_2xx_is_a_failure(monkeypatch, settings, nurse_client, appointment):
    settings.RESCHEDULE_WEBHOOK_URL = WEBHOOK
    monkeypatch.setattr('scheduling.services.notify.requests.post', lambda *a, **kw: _Resp(500))

    resp = _request(nurse_client, appointment)

    assert resp.status_code == 502
    assert resp.data['detail'] == 'Failed to send reschedule request'


def test_transport_error_is_a_failure(monkeypatch, settings, nurse_client, appointment):
    settings.RESCHEDULE_WEBHOOK_URL = WEBHOOK

    def boom(*a, **kw):
        raise requests.ConnectionError('refused')

    monkeypatch.setattr('scheduling.services.notify.requests.post', boom)
    assert _request(nurse_client, appointment).status_code == 502


def test_unconfigured_webhook(settings, nurse_client, appointment):
    settings.RESCHEDULE_WEBHOOK_URL = ''
    resp = _request(nurse_client, appointment)
    assert resp.status_code == 503
    assert resp.data['code'] == 'notification_failed'


def test_empty_last_name_is_sent_as_blank(monkeypatch, settings, nurse_client, appointment):
    settings.RESCHEDULE_WEBHOOK_URL = WEBHOOK
    appointment.patient.last_name = ''
    appointment.patient.save()
    sent = {}

    def fake_post(url, json=None, timeout=None):
        sent.update(json)
        return _Resp(204)

    monkeypatch.setattr('scheduling.services.notify.requests.post', fake_post)
    assert _request(nurse_client, appointment).status_code == 200
    assert sent['patient_last_name'] == ''


def test_doctors_cannot_request_reschedule(doctor_user, appointment):
    client = APIClient()
    client.force_authenticate(user=doctor_user)
    assert _request(client, appointment).status_code == 403
