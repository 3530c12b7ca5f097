import os
import logging
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from config.settings import BASE_DIR, CORS_ORIGINS, LOG_LEVEL
from database import init_schema

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ============================================================
# FASTAPI APP
# ============================================================

app = FastAPI(
    title='Invoice Studio API',
    description='Invoices with print-ready single-page PDF export',
    version='1.0.0'
)


# ============================================================
# CORS CONFIGURATION
# ============================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Content-Disposition"]
)


# ============================================================
# INITIALIZE DATABASE SCHEMA ON STARTUP
# ============================================================

@app.on_event("startup")
def startup():
    init_schema()
    logger.info("Invoice Studio API started")


# ============================================================
# STATIC FILES (logos, card icons)
# ============================================================

ASSETS_DIR = os.path.join(BASE_DIR, "assets")
if os.path.exists(ASSETS_DIR):
    app.mount("/assets", StaticFiles(directory=ASSETS_DIR), name="assets")


# ============================================================
# ROUTERS
# ============================================================

from auth.router import router as auth_router
from users.router import router as users_router
from invoices.router import router as invoices_router
from dashboard.router import router as dashboard_router

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(invoices_router)
app.include_router(dashboard_router)


# ============================================================
# ROOT & HEALTH ENDPOINTS
# ============================================================

@app.get("/")
def read_root():
    return {
        "message": "Invoice Studio API is running!",
        "version": "1.0.0",
        "database": "PostgreSQL"
    }


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "modules": ["auth", "users", "invoices", "dashboard"]
    }
