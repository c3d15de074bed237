"""Real-time notification request schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BusLocationNotification(BaseModel):
    route_id: int
    bus_id: int
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class RouteDelayNotification(BaseModel):
    route_id: int
    delay_minutes: int = Field(..., ge=0)
    reason: str = ""


class RouteModifiedNotification(BaseModel):
    route_id: int
    modification_type: str


class SystemAlertNotification(BaseModel):
    message: str = Field(..., min_length=1)
    alert_type: str = "info"


class NotificationResult(BaseModel):
    event: str
    delivered: int
