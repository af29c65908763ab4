# app/main.py

from fastapi import FastAPI

from app.core.logging_config import configure_logging
from app.core.security import require_auth
from app.routes import health
from app.routes.admin import router as admin_router
from app.routes.webhooks import router as webhook_router

configure_logging()

app = FastAPI(title="Snipe-IT to Jamf Sync")

app.include_router(webhook_router)  # Webhooks authenticate with the shared secret
app.include_router(admin_router, dependencies=[require_auth()])
app.include_router(health.router)  # Health check should be accessible without auth
