# business_hub/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise.exceptions import DBConnectionError, IntegrityError, OperationalError

from business_hub.config import settings
from business_hub.core.db import init_db, close_db
from business_hub.core.errors import AppError, StoreUnavailable

from business_hub.api.v1.routers import auth, credits, rooms, invoices, transactions, ai, admin
from business_hub.api.v1.routers.ws_rooms import router as ws_rooms_router

from business_hub.core.bootstrap import ensure_default_admin, seed_credit_grants
logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.warning("[api] %s %s -> %s", request.method, request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.to_dict()})

@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    # Registered apart from OperationalError, its base class
    logger.warning("[api] constraint violation on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=409,
        content={"success": False, "error": {"code": "CONFLICT", "message": "The record conflicts with existing data."}},
    )

@app.exception_handler(OperationalError)
@app.exception_handler(DBConnectionError)
async def store_error_handler(request: Request, exc: Exception):
    logger.exception("[api] store failure on %s %s", request.method, request.url.path)
    err = StoreUnavailable()
    return JSONResponse(status_code=err.status_code, content={"success": False, "error": err.to_dict()})

@app.on_event("startup")
async def on_startup():
    await init_db()
    # Ensure there's a default admin account on first run
    await ensure_default_admin()
    await seed_credit_grants()

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(credits.router, prefix="/api/v1")
app.include_router(rooms.router, prefix="/api/v1")
app.include_router(invoices.router, prefix="/api/v1")
app.include_router(transactions.router, prefix="/api/v1")
app.include_router(ai.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")

# WebSocket
app.include_router(ws_rooms_router)

@app.get("/healthz")
def healthz():
    return {"ok": True}
