"""Resistor Calc Backend: FastAPI application entry point."""

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.routes import series, solve

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    # Series tables are read-only for the life of the process
    from resistor_calc.series import STANDARD_SERIES
    app.state.series_catalog = dict(STANDARD_SERIES)
    yield


app = FastAPI(
    title="Resistor Calc API",
    description="Standard resistor value search against algebraic bounds",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow frontend origins
_frontend_url = os.getenv("FRONTEND_URL")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[_frontend_url] if _frontend_url else [],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route modules
app.include_router(series.router, prefix="/api", tags=["Series"])
app.include_router(solve.router, prefix="/api", tags=["Solve"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "resistor-calc-backend"}
