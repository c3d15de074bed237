"""Route optimization endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from ...models.domain import GeoPoint
from ...schemas.optimization import (
    RouteAnalysisResponse,
    RouteOptimizationRequest,
    RouteOptimizationResponse,
    StopLocationRequest,
    StopLocationResponse,
    StopOrderRequest,
    StopOrderResponse,
)
from ...schemas.trips import GeoPointModel
from ...services.geospatial import polygon_from_coordinates
from ...services.optimization.sequence_solver import order_stops
from ...services.optimization.service import (
    analysis_to_response,
    analyze_route,
    find_optimal_stop_locations,
    generate_route_alternatives,
    optimize_route_request,
    proposals_to_response,
    request_from_payload,
    result_to_response,
)

router = APIRouter(prefix="/optimization", tags=["optimization"])


@router.post("/optimize", response_model=RouteOptimizationResponse, status_code=status.HTTP_200_OK)
def optimize(payload: RouteOptimizationRequest) -> RouteOptimizationResponse:
    try:
        return optimize_route_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}"
        ) from exc


@router.post("/alternatives", response_model=List[RouteOptimizationResponse], status_code=status.HTTP_200_OK)
def alternatives(
    payload: RouteOptimizationRequest,
    number_of_alternatives: int = Query(3, ge=1, le=10),
) -> List[RouteOptimizationResponse]:
    try:
        results = generate_route_alternatives(request_from_payload(payload), number_of_alternatives)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error generating route alternatives: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate route alternatives: {str(exc)}"
        ) from exc
    return [result_to_response(result) for result in results]


@router.post("/order-stops", response_model=StopOrderResponse, status_code=status.HTTP_200_OK)
def order(payload: StopOrderRequest) -> StopOrderResponse:
    """Visiting order for the given stops, starting from the first one."""
    points = [GeoPoint(latitude=stop.latitude, longitude=stop.longitude) for stop in payload.stops]
    ordered = order_stops(points)
    return StopOrderResponse(
        stops=[GeoPointModel(latitude=point.latitude, longitude=point.longitude) for point in ordered]
    )


@router.get("/routes/{route_id}/analysis", response_model=RouteAnalysisResponse, status_code=status.HTTP_200_OK)
def analysis(route_id: int) -> RouteAnalysisResponse:
    try:
        return analysis_to_response(analyze_route(route_id))
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error analyzing route {route_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to analyze route: {str(exc)}"
        ) from exc


@router.post("/stop-locations", response_model=StopLocationResponse, status_code=status.HTTP_200_OK)
def stop_locations(payload: StopLocationRequest) -> StopLocationResponse:
    try:
        area = polygon_from_coordinates(payload.service_area)
        return proposals_to_response(find_optimal_stop_locations(area, payload.max_stops))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error finding optimal stop locations: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to find optimal stop locations: {str(exc)}"
        ) from exc
