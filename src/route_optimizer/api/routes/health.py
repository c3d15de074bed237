"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and the transit network tables."""
    from ...db.supabase import STOPS_TABLE, get_supabase_client
    from ...services.network import get_network

    supabase = get_supabase_client()
    network = get_network()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set ROUTE_OPT_SUPABASE_URL and ROUTE_OPT_SUPABASE_KEY environment variables.",
            "stops_count": network.count_all_stops(),
            "routes_count": len(network.list_routes()),
        }

    try:
        supabase.table(STOPS_TABLE).select("id", count="exact").limit(1).execute()
        return {
            "configured": True,
            "connected": True,
            "stops_count": network.count_all_stops(),
            "routes_count": len(network.list_routes()),
            "message": f"Database connected. Network has {network.count_all_stops()} stops.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
