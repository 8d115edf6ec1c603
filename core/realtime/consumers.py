import json

from channels.generic.websocket import AsyncWebsocketConsumer


class DashboardConsumer(AsyncWebsocketConsumer):
    """Pushes ``records.changed`` events so open dashboards know to refetch.

    Events only carry ids, never vitals.
    """
    GROUP = "dashboard"

    async def connect(self):
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def records_changed(self, event):
        # event: {"type": "records.changed", "op": ..., "motherId": ..., "recordId": ..., "ts": ...}
        await self.send(json.dumps(event))
