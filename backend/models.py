"""Pydantic models for Resistor Calc API requests and responses."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from resistor_calc import config


# --- Series ---

class SeriesInfo(BaseModel):
    name: str
    size: int = Field(..., description="Number of values across all decades")
    per_decade: int
    minimum: float = Field(..., description="Smallest value (Ohms)")
    maximum: float = Field(..., description="Largest value (Ohms)")


class SeriesListResponse(BaseModel):
    series: list[SeriesInfo]


# --- Search ---

class CombinationsRequest(BaseModel):
    slots: list[str] = Field(..., min_length=1, max_length=12, description="Series name per slot, R1 first")


class CombinationsResponse(BaseModel):
    combinations: int


class SolveRequest(BaseModel):
    slots: list[str] = Field(..., min_length=1, max_length=12, description="Series name per slot, R1 first")
    names: Optional[list[str]] = Field(None, description="Variable name per slot (default R1, R2, ...)")
    bounds: list[str] = Field(..., min_length=1, description="Relations such as 'R1+R2 <= 1e6'")
    top_k: int = Field(config.DEFAULT_TOP_K, ge=1, le=1000, description="Results to return (default RCALC_TOP_K)")
    workers: Optional[int] = Field(None, ge=1, le=32)


class MatchValue(BaseModel):
    name: str
    value: float
    display: str


class RankedMatch(BaseModel):
    rank: int
    error: float = Field(..., ge=0)
    index: int = Field(..., description="Enumeration index of the combination")
    values: list[MatchValue]


class SolveResponse(BaseModel):
    combinations: int
    explored: int
    complete: bool
    results: list[RankedMatch]


class ParseErrorDetail(BaseModel):
    bound: str
    position: int
    expected: str
    kind: str
