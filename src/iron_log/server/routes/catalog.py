"""
Exercise catalog API routes for IronLog.
"""

from fastapi import APIRouter, Query

from ...catalog import exercises_by_muscle_group, search_exercises

router = APIRouter()


@router.get("/catalog")
async def catalog() -> dict:
    """Library exercises grouped by muscle group."""
    grouped = exercises_by_muscle_group()
    items = {
        group: [{"name": e.name, "defaultWeight": e.default_weight} for e in entries]
        for group, entries in grouped.items()
    }
    return {"ok": True, "items": items, "total": sum(len(v) for v in items.values())}


@router.get("/catalog/search")
async def catalog_search(
    q: str = Query(..., min_length=1), limit: int = Query(10, ge=1, le=50)
) -> dict:
    matches = search_exercises(q)[:limit]
    items = [
        {"name": e.name, "muscleGroup": e.muscle_group, "defaultWeight": e.default_weight}
        for e in matches
    ]
    return {"ok": True, "items": items, "query": q, "total": len(items)}
