"""Series routes: the standard value tables."""

from fastapi import APIRouter, HTTPException, Request

from backend.models import SeriesInfo, SeriesListResponse
from resistor_calc.series import POWERS, RSeries

router = APIRouter()


def _series_info(series: RSeries) -> SeriesInfo:
    return SeriesInfo(
        name=series.name,
        size=len(series),
        per_decade=len(series) // len(POWERS),
        minimum=series.minimum,
        maximum=series.maximum,
    )


@router.get("/series", response_model=SeriesListResponse)
async def list_series(request: Request):
    """List the standard series available for slots."""
    catalog = request.app.state.series_catalog
    return SeriesListResponse(series=[_series_info(s) for s in catalog.values()])


@router.get("/series/{name}")
async def get_series(request: Request, name: str):
    """Get one series with its full list of values."""
    series = request.app.state.series_catalog.get(name.upper())
    if series is None:
        raise HTTPException(status_code=404, detail=f"Series '{name}' not found")
    return {
        "series": _series_info(series),
        "values": list(series.values),
    }
