"""WebSocket connection registry with named groups."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from ...config import settings

CITY_MANAGERS = "CityManagers"
TRAVELLERS = "Travellers"


def route_group(route_id: int) -> str:
    return f"Route_{route_id}"


def management_group(route_id: int) -> str:
    return f"Management_Route_{route_id}"


class PushConnection(Protocol):
    async def send_json(self, data: Any) -> None: ...


def _envelope(event: str, data: Any) -> dict:
    return {"event": event, "data": data, "timestamp": datetime.now(timezone.utc).isoformat()}


class ConnectionHub:
    """Tracks connected clients and the groups they belong to.

    Every client joins either the managers or the travellers group on
    connect and may subscribe to per-route groups afterwards. A client whose
    send fails is dropped from every group.
    """

    def __init__(self, manager_roles: tuple[str, ...] | None = None) -> None:
        self.manager_roles = tuple(manager_roles if manager_roles is not None else settings.manager_roles)
        self._connections: dict[str, PushConnection] = {}
        self._roles: dict[str, Optional[str]] = {}
        self._groups: dict[str, set[str]] = {}

    def is_manager(self, connection_id: str) -> bool:
        return self._roles.get(connection_id) in self.manager_roles

    def register(self, connection: PushConnection, role: str | None = None, user_id: str | None = None) -> str:
        connection_id = uuid.uuid4().hex
        self._connections[connection_id] = connection
        self._roles[connection_id] = role
        group = CITY_MANAGERS if role in self.manager_roles else TRAVELLERS
        self.add_to_group(connection_id, group)
        logging.info(f"Client connected: {connection_id}, user: {user_id}, group: {group}")
        return connection_id

    def unregister(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)
        self._roles.pop(connection_id, None)
        for members in self._groups.values():
            members.discard(connection_id)
        logging.info(f"Client disconnected: {connection_id}")

    def add_to_group(self, connection_id: str, group: str) -> None:
        self._groups.setdefault(group, set()).add(connection_id)

    def remove_from_group(self, connection_id: str, group: str) -> None:
        members = self._groups.get(group)
        if members is not None:
            members.discard(connection_id)

    def members(self, group: str) -> set[str]:
        return set(self._groups.get(group, ()))

    def stats(self) -> dict:
        return {
            "total_connections": len(self._connections),
            "travellers_connected": len(self._groups.get(TRAVELLERS, ())),
            "managers_connected": len(self._groups.get(CITY_MANAGERS, ())),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def send_to_connection(self, connection_id: str, event: str, data: Any) -> bool:
        connection = self._connections.get(connection_id)
        if connection is None:
            return False
        try:
            await connection.send_json(_envelope(event, data))
        except Exception as e:
            logging.warning(f"Dropping connection {connection_id} after failed send: {e}")
            self.unregister(connection_id)
            return False
        return True

    async def send_to_group(self, group: str, event: str, data: Any) -> int:
        delivered = 0
        for connection_id in sorted(self.members(group)):
            if await self.send_to_connection(connection_id, event, data):
                delivered += 1
        return delivered

    async def broadcast(self, event: str, data: Any) -> int:
        delivered = 0
        for connection_id in sorted(self._connections):
            if await self.send_to_connection(connection_id, event, data):
                delivered += 1
        return delivered

    async def handle_message(self, connection_id: str, message: dict) -> None:
        """Dispatch a client message of the form ``{"action": ..., "route_id": ...}``."""
        action = message.get("action")
        route_id = message.get("route_id")

        if action in {"subscribe", "unsubscribe", "join_management"}:
            try:
                route_id = int(route_id)
            except (TypeError, ValueError):
                await self.send_to_connection(connection_id, "Error", {"message": "route_id must be an integer"})
                return

        if action == "subscribe":
            self.add_to_group(connection_id, route_group(route_id))
            logging.info(f"Connection {connection_id} subscribed to route {route_id}")
            await self.send_to_connection(connection_id, "RouteSubscriptionConfirmed", route_id)
        elif action == "unsubscribe":
            self.remove_from_group(connection_id, route_group(route_id))
            logging.info(f"Connection {connection_id} unsubscribed from route {route_id}")
            await self.send_to_connection(connection_id, "RouteUnsubscriptionConfirmed", route_id)
        elif action == "join_management":
            if not self.is_manager(connection_id):
                await self.send_to_connection(connection_id, "Error", {"message": "Route management requires a manager role"})
                return
            self.add_to_group(connection_id, management_group(route_id))
            logging.info(f"Manager connection {connection_id} joined management for route {route_id}")
        elif action == "stats":
            if not self.is_manager(connection_id):
                await self.send_to_connection(connection_id, "Error", {"message": "Connection stats require a manager role"})
                return
            await self.send_to_connection(connection_id, "ConnectionStats", self.stats())
        else:
            await self.send_to_connection(connection_id, "Error", {"message": f"Unknown action '{action}'"})


hub = ConnectionHub()
