from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from quickdose.db.session import get_async_session
from quickdose.routes.shops import resolve_radius
from quickdose.schemas.shops import MedicineListResponse
from quickdose.services.geospatial import GeoPoint
from quickdose.services.medicines import search_medicines

router = APIRouter(prefix="/medicines", tags=["medicines"])


@router.get("", response_model=MedicineListResponse)
async def medicines_search(
    q: Optional[str] = Query(None, max_length=100),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    radius_km: Optional[float] = Query(None),
) -> MedicineListResponse:
    """Search medicines by name or category, nearest pharmacies first when a location is given."""
    if (lat is None) != (lon is None):
        raise HTTPException(status_code=400, detail="lat and lon must be provided together")

    if lat is None:
        # Alphabetical search; radius_km does not apply.
        async with get_async_session() as session:
            return await search_medicines(session, q=q)

    radius = resolve_radius(radius_km)
    async with get_async_session() as session:
        return await search_medicines(session, q=q, origin=GeoPoint(lat, lon), radius_km=radius)


__all__ = ["router"]
