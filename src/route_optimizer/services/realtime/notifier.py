"""Push notifications about buses and routes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from .delays import DelayBoard, delay_board
from .hub import CITY_MANAGERS, TRAVELLERS, ConnectionHub, hub, route_group


class RouteUpdateNotifier:
    def __init__(self, connections: ConnectionHub, delays: DelayBoard) -> None:
        self.connections = connections
        self.delays = delays

    async def notify_bus_location(self, route_id: int, bus_id: int, latitude: float, longitude: float) -> int:
        update = {
            "route_id": route_id,
            "bus_id": bus_id,
            "latitude": latitude,
            "longitude": longitude,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        delivered = await self.connections.send_to_group(route_group(route_id), "BusLocationUpdate", update)
        delivered += await self.connections.send_to_group(CITY_MANAGERS, "BusLocationUpdate", update)
        logging.debug(f"Bus location update sent for route {route_id}, bus {bus_id}")
        return delivered

    async def notify_route_delay(self, route_id: int, delay_minutes: int, reason: str) -> int:
        """Record the delay for trip planning and push it to subscribers and managers."""
        report = self.delays.record(route_id, delay_minutes, reason)
        update = {
            "route_id": route_id,
            "delay_minutes": report.delay_minutes,
            "reason": reason,
            "timestamp": report.reported_at.isoformat(),
        }
        delivered = await self.connections.send_to_group(route_group(route_id), "RouteDelayUpdate", update)
        delivered += await self.connections.send_to_group(CITY_MANAGERS, "RouteDelayUpdate", update)
        logging.info(f"Route delay update sent for route {route_id}: {report.delay_minutes} minutes - {reason}")
        return delivered

    async def notify_route_modified(self, route_id: int, modification_type: str) -> int:
        update = {
            "route_id": route_id,
            "modification_type": modification_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        delivered = await self.connections.send_to_group(TRAVELLERS, "RouteModified", update)
        delivered += await self.connections.send_to_group(CITY_MANAGERS, "RouteModified", update)
        logging.info(f"Route modification notification sent for route {route_id}: {modification_type}")
        return delivered

    async def notify_system_alert(self, message: str, alert_type: str = "info") -> int:
        alert = {
            "message": message,
            "alert_type": alert_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        delivered = await self.connections.broadcast("SystemAlert", alert)
        logging.info(f"System alert sent to all clients: {message} ({alert_type})")
        return delivered


notifier = RouteUpdateNotifier(hub, delay_board)
