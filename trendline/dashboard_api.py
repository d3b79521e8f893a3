"""
Metrics Dashboard API

Serves aggregate metrics and trend series to dashboard front ends.

Run with: uvicorn trendline.dashboard_api:app
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .metrics.api import router as metrics_router

app = FastAPI(
    title="Trendline Metrics API",
    description="Aggregate metrics and time-bucketed trends for dashboards",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(metrics_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
