import logging
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from config import settings
from create_tables import crear_tablas
from database import SessionLocal

from modules.auth.models.user import Role, User
from modules.auth.services.auth_service import AuthService
from modules.auth.controllers.auth_controller import router as auth_router
from modules.notifications.controllers.notification_controller import router as notification_router
from modules.contracts.controllers.guest_controller import router as guest_router
from modules.contracts.controllers.admin_contract_controller import router as admin_contract_router
from modules.contracts.controllers.template_controller import router as template_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting contract signing service")
    crear_tablas()
    _seed_admin()
    yield
    logger.info("Contract signing service stopped")


def _seed_admin():
    """Creates the first administrator from SEED_ADMIN_* on an empty database."""
    if not settings.SEED_ADMIN_EMAIL or not settings.SEED_ADMIN_PASSWORD:
        return
    with SessionLocal() as session:
        if session.query(User).count() > 0:
            return
        admin = AuthService.create_user(
            session,
            name="Administrator",
            email=settings.SEED_ADMIN_EMAIL,
            password=settings.SEED_ADMIN_PASSWORD,
            role=Role.ADMIN
        )
        logger.info("Seeded administrator %s", admin.email)


app = FastAPI(
    title="Contract Signing Service",
    description="Contract drafting and e-signature for guests without an account",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Accept", "Content-Type", "Authorization", "Origin"],
    max_age=86400,
)

# Routers
app.include_router(auth_router)
app.include_router(notification_router, prefix="/notifications", tags=["notifications"])
app.include_router(guest_router)
app.include_router(admin_contract_router)
app.include_router(template_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
