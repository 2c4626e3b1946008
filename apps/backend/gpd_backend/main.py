import logging

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gpd_backend.api.routes import dashboard
from gpd_backend.core.config import get_settings
from gpd_backend.core.errors import (
    DashboardError,
    dashboard_exception_handler,
    transport_exception_handler,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

settings = get_settings()

app = FastAPI(
    title="PR Dashboard API",
    description="Open pull requests across GitHub accounts and organizations",
    version="0.1.0",
)

app.add_exception_handler(DashboardError, dashboard_exception_handler)
app.add_exception_handler(httpx.RequestError, transport_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(",") if settings.cors_origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
    max_age=86400,
)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
