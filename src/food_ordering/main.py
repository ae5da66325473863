import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health
from .api.errors import register_exception_handlers
from .api.routes.admin import dashboard_router, router as admin_router
from .api.routes.auth import router as auth_router
from .api.routes.cart import router as cart_router
from .api.routes.foods import router as foods_router
from .api.routes.orders import router as orders_router
from .config import settings
from .db.session import engine
from .logging_setup import setup_logging
from .services.audit import audit_logger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    logger.info("Application started")
    yield
    await audit_logger.drain()
    await engine.dispose()
    logger.info("Application stopped")


app = FastAPI(title="Food Ordering API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

# Подключаем роуты
app.include_router(health.router)
app.include_router(auth_router)
app.include_router(foods_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(admin_router)
app.include_router(dashboard_router)
