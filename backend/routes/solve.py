"""Solve routes: run the exhaustive resistor search."""

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from backend.models import (
    CombinationsRequest,
    CombinationsResponse,
    MatchValue,
    ParseErrorDetail,
    RankedMatch,
    SolveRequest,
    SolveResponse,
)
from resistor_calc import config
from resistor_calc.calc import RCalc
from resistor_calc.constraints import ConstraintBuilder
from resistor_calc.errors import DegenerateSearchError, EvaluationError, ParseError
from resistor_calc.formatting import rkm_code

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_calc(request: Request, slots: list[str], names=None) -> RCalc:
    catalog = request.app.state.series_catalog
    unknown = [s for s in slots if s.upper() not in catalog]
    if unknown:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown series {unknown}. Must be one of: {list(catalog.keys())}",
        )
    try:
        return RCalc([catalog[s.upper()] for s in slots], names=names)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/combinations", response_model=CombinationsResponse)
async def count_combinations(body: CombinationsRequest, request: Request):
    """Number of combinations a search over these slots would score."""
    rcalc = _build_calc(request, body.slots)
    return CombinationsResponse(combinations=rcalc.combinations())


@router.post("/solve", response_model=SolveResponse)
async def solve(body: SolveRequest, request: Request):
    """Rank every combination of standard values against the bounds."""
    rcalc = _build_calc(request, body.slots, body.names)

    total = rcalc.combinations()
    if total > config.MAX_API_COMBINATIONS:
        raise HTTPException(
            status_code=413,
            detail=f"{total} combinations exceeds the limit of {config.MAX_API_COMBINATIONS}. Use coarser series.",
        )

    try:
        builder = ConstraintBuilder(variables=rcalc.names)
        for text in body.bounds:
            builder.bound(text)
        constraints = builder.finish()
    except ParseError as e:
        detail = ParseErrorDetail(bound=e.text, position=e.position, expected=e.expected, kind=e.kind.value)
        raise HTTPException(status_code=422, detail=detail.model_dump())
    except EvaluationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        res = await run_in_threadpool(rcalc.calc, constraints, workers=body.workers, keep=body.top_k)
    except DegenerateSearchError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EvaluationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception:
        logger.error("Search failed for bounds %s", body.bounds, exc_info=True)
        raise HTTPException(status_code=500, detail="Search failed. Please try again.")

    results = [
        RankedMatch(
            rank=rank,
            error=error,
            index=rset.index,
            values=[
                MatchValue(name=name, value=value, display=rkm_code(value))
                for name, value in zip(rset.names, rset.values)
            ],
        )
        for rank, (error, rset) in enumerate(res.top(body.top_k), start=1)
    ]

    return SolveResponse(
        combinations=total,
        explored=res.explored,
        complete=res.complete,
        results=results,
    )
