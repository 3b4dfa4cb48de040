# backend/secreports/main.py
import logging
import os
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .errors import register_exception_handlers

from .apps.accounts.router_public import router as accounts_public_router
from .apps.accounts.router_admin import router as accounts_admin_router
from .apps.governorates.router import router as governorates_router
from .apps.reports.router import router as reports_router
from .apps.events.router import router as events_router
from .apps.coordinations.router import router as coordinations_router
from .apps.meetings.router import router as meetings_router
from .apps.memos.router import router as memos_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "info").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def _allowed_origins() -> List[str]:
    """
    Parse CORS_ALLOWED_ORIGINS from env.

    Accepts comma-separated origins. If unset, defaults to local dev ports.
    """
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if raw:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        if origins:
            return origins
    return [
        "http://localhost:3000",
        "http://localhost:3001",
    ]


app = FastAPI(title="Security Reports API", version="1.0.0")
cors_origins = _allowed_origins()
allow_credentials = "*" not in cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/", tags=["health"])
def read_root():
    return {"status": "ok", "message": "Security reports backend is running"}


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


app.include_router(accounts_public_router)
app.include_router(accounts_admin_router)
app.include_router(governorates_router)
app.include_router(reports_router)
app.include_router(events_router)
app.include_router(coordinations_router)
app.include_router(meetings_router)
app.include_router(memos_router)
