"""Trip planning endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from ...schemas.trips import (
    RealTimeUpdateModel,
    SaveTripRequest,
    TripHistoryItem,
    TripOptionModel,
    TripPlanRequest,
    TripPlanResponse,
)
from ...services.planning.service import (
    apply_realtime_delays,
    get_optimal_trip,
    get_realtime_updates,
    get_user_trip_history,
    itinerary_from_model,
    itinerary_to_model,
    plan_trip_request,
    preferences_from_request,
    realtime_update_to_model,
    save_trip_request,
    to_geopoint,
)

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("/plan", response_model=TripPlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: TripPlanRequest) -> TripPlanResponse:
    try:
        return plan_trip_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error planning trip: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan trip: {str(exc)}"
        ) from exc


@router.post("/optimal", response_model=TripOptionModel, status_code=status.HTTP_200_OK)
def optimal(payload: TripPlanRequest) -> TripOptionModel:
    """Best trip option for the requested objective."""
    try:
        itinerary = get_optimal_trip(
            to_geopoint(payload.origin),
            to_geopoint(payload.destination),
            payload.departure_time,
            preferences_from_request(payload),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error finding optimal trip: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to find optimal trip: {str(exc)}"
        ) from exc
    if itinerary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No trip options found")
    return itinerary_to_model(itinerary)


@router.post("/realtime-adjust", response_model=TripOptionModel, status_code=status.HTTP_200_OK)
def realtime_adjust(payload: TripOptionModel) -> TripOptionModel:
    """Shift a planned trip by the delays currently reported for its routes."""
    try:
        return itinerary_to_model(apply_realtime_delays(itinerary_from_model(payload)))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error adjusting trip with real-time data: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to adjust trip: {str(exc)}"
        ) from exc


@router.get("/realtime/{route_id}", response_model=List[RealTimeUpdateModel], status_code=status.HTTP_200_OK)
def realtime(route_id: int) -> List[RealTimeUpdateModel]:
    return [realtime_update_to_model(update) for update in get_realtime_updates(route_id)]


@router.post("/history", status_code=status.HTTP_200_OK)
def save_history(payload: SaveTripRequest) -> dict:
    try:
        saved = save_trip_request(payload.user_id, payload.request, payload.selected_route_id)
    except Exception as exc:
        logging.exception(f"Error saving trip request: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save trip request: {str(exc)}"
        ) from exc
    return {"success": saved}


@router.get("/history/{user_id}", response_model=List[TripHistoryItem], status_code=status.HTTP_200_OK)
def history(user_id: int, page_size: int = Query(20, ge=1, le=200)) -> List[TripHistoryItem]:
    return get_user_trip_history(user_id, page_size=page_size)
