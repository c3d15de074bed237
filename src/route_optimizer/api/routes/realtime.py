"""Real-time push endpoints."""

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from ...schemas.realtime import (
    BusLocationNotification,
    NotificationResult,
    RouteDelayNotification,
    RouteModifiedNotification,
    SystemAlertNotification,
)
from ...services.realtime import hub, notifier

router = APIRouter(tags=["realtime"])


@router.websocket("/ws/route-updates")
async def route_updates(
    websocket: WebSocket,
    role: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
) -> None:
    """Push channel for route events.

    Clients send ``{"action": "subscribe", "route_id": 12}`` (or
    ``unsubscribe``) to follow a route. Managers may also send
    ``join_management`` and ``stats``.
    """
    await websocket.accept()
    connection_id = hub.register(websocket, role=role, user_id=user_id)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            try:
                message = json.loads(frame.get("text") or "")
            except ValueError:
                message = None
            if not isinstance(message, dict):
                await hub.send_to_connection(connection_id, "Error", {"message": "Messages must be JSON objects"})
                continue
            await hub.handle_message(connection_id, message)
    except WebSocketDisconnect:
        logging.debug(f"WebSocket {connection_id} closed by client")
    finally:
        hub.unregister(connection_id)


@router.post("/realtime/bus-location", response_model=NotificationResult, status_code=status.HTTP_200_OK)
async def bus_location(payload: BusLocationNotification) -> NotificationResult:
    delivered = await notifier.notify_bus_location(payload.route_id, payload.bus_id, payload.latitude, payload.longitude)
    return NotificationResult(event="BusLocationUpdate", delivered=delivered)


@router.post("/realtime/route-delay", response_model=NotificationResult, status_code=status.HTTP_200_OK)
async def route_delay(payload: RouteDelayNotification) -> NotificationResult:
    delivered = await notifier.notify_route_delay(payload.route_id, payload.delay_minutes, payload.reason)
    return NotificationResult(event="RouteDelayUpdate", delivered=delivered)


@router.post("/realtime/route-modified", response_model=NotificationResult, status_code=status.HTTP_200_OK)
async def route_modified(payload: RouteModifiedNotification) -> NotificationResult:
    delivered = await notifier.notify_route_modified(payload.route_id, payload.modification_type)
    return NotificationResult(event="RouteModified", delivered=delivered)


@router.post("/realtime/system-alert", response_model=NotificationResult, status_code=status.HTTP_200_OK)
async def system_alert(payload: SystemAlertNotification) -> NotificationResult:
    delivered = await notifier.notify_system_alert(payload.message, payload.alert_type)
    return NotificationResult(event="SystemAlert", delivered=delivered)
