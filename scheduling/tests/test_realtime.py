import asyncio
import datetime

import pytest
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APIClient

from clinic.asgi import application
from scheduling.models import Appointment
from scheduling.realtime.consumers import AppointmentsConsumer
from scheduling.services.realtime import APPOINTMENTS_GROUP, appointment_event


@pytest.mark.asyncio
async def test_anonymous_socket_is_rejected():
    communicator = WebsocketCommunicator(AppointmentsConsumer.as_asgi(), "/ws/appointments/")
    communicator.scope["user"] = AnonymousUser()
    connected, code = await communicator.connect()
    assert not connected
    assert code == 4003


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_profiled_user_receives_changes(nurse_user):
    communicator = WebsocketCommunicator(AppointmentsConsumer.as_asgi(), "/ws/appointments/")
    communicator.scope["user"] = nurse_user
    connected, _ = await communicator.connect()
    assert connected

    event = {"type": "appointments.changed", "event": "UPDATE", "id": "x", "doctorId": "y", "date": "2026-03-02"}
    await get_channel_layer().group_send(APPOINTMENTS_GROUP, event)
    assert await communicator.receive_json_from() == event
    await communicator.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_saving_and_deleting_broadcasts(doctor, patient):
    layer = get_channel_layer()
    channel = await layer.new_channel()
    await layer.group_add(APPOINTMENTS_GROUP, channel)

    appt = await database_sync_to_async(Appointment.objects.create)(
        patient=patient, doctor=doctor, appointment_date=datetime.date(2026, 3, 2),
        appointment_time=datetime.time(9, 0), complaint='cough',
    )
    inserted = await asyncio.wait_for(layer.receive(channel), timeout=1)
    assert inserted == appointment_event(appt, "INSERT")
    assert inserted["doctorId"] == str(doctor.id)

    appt_id = appt.id
    await database_sync_to_async(appt.delete)()
    deleted = await asyncio.wait_for(layer.receive(channel), timeout=1)
    assert deleted["event"] == "DELETE"
    assert deleted["id"] == str(appt_id)


@pytest.fixture
def nurse_login(nurse_user):
    r = APIClient().post("/api/auth/login", {"username": "nurse1", "password": "P@ssw0rd1"}, format="json")
    assert r.status_code == 200
    return r.data


async def _connect(path, headers=None):
    communicator = WebsocketCommunicator(application, path, headers=headers or [])
    connected, code = await communicator.connect()
    return communicator, connected, code


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_api_token_in_query_string_connects(nurse_login):
    communicator, connected, _ = await _connect(f"/ws/appointments/?token={nurse_login['token']}")
    assert connected

    event = {"type": "appointments.changed", "event": "INSERT", "id": "x", "doctorId": "y", "date": "2026-03-02"}
    await get_channel_layer().group_send(APPOINTMENTS_GROUP, event)
    assert await communicator.receive_json_from() == event
    await communicator.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
@pytest.mark.parametrize("keyword, field", [("Token", "token"), ("Bearer", "jwt_access")])
async def test_authorization_header_connects(nurse_login, keyword, field):
    header = f"{keyword} {nurse_login[field]}".encode()
    communicator, connected, _ = await _connect("/ws/appointments/", headers=[(b"authorization", header)])
    assert connected
    await communicator.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_unknown_token_is_rejected():
    _, connected, code = await _connect("/ws/appointments/?token=not-a-real-token")
    assert not connected
    assert code == 4003
