import json

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.contrib.auth.models import AnonymousUser

from scheduling.permissions import position_of
from scheduling.services.realtime import APPOINTMENTS_GROUP


class AppointmentsConsumer(AsyncWebsocketConsumer):
    """Pushes appointment change notifications to both dashboards."""

    GROUP = APPOINTMENTS_GROUP

    async def connect(self):
        user = self.scope.get("user") or AnonymousUser()
        if not user.is_authenticated:
            await self.close(code=4003)
            return
        position = await database_sync_to_async(position_of)(user)
        if position is None:
            await self.close(code=4003)
            return
        self.joined = True
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if getattr(self, "joined", False):
            await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def appointments_changed(self, event):
        # event: {"type": "appointments.changed", "event": "UPDATE", "id": ..., "doctorId": ..., "date": ...}
        await self.send(json.dumps(event))
