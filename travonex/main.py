import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from travonex.core.config import settings
from travonex.core.logging import setup_logging
from travonex.api.v1.api import api_router
from travonex.services.errors import InvariantViolation

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# Storefront and organizer dashboard origins come from CORS_ORIGINS outside local dev
_default_origins = [
    "http://127.0.0.1:3000", "http://localhost:3000",
    "http://127.0.0.1:9002", "http://localhost:9002",
]
_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(InvariantViolation)
async def invariant_violation_handler(request: Request, exc: InvariantViolation):
    # Already logged where raised; the caller only learns that it is internal
    return JSONResponse(status_code=500, content={"detail": {"kind": "InvariantViolation", "message": "Internal error"}})


@app.get("/health")
def health():
    return {"status": "ok"}
