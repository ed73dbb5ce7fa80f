# app/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.errors import register_error_handlers
from app.api.routers import auth, carts, health, orders, products
from app.data.database import Datastore
from app.services.lock_service import LockService
from app.services.storage_service import ImageStorage
from app.utils.settings import CHECKOUT_LOCK_ENABLED
from app.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(
    datastore: Datastore | None = None,
    lock_service: LockService | None = None,
    storage: ImageStorage | None = None,
) -> FastAPI:
    datastore = datastore or Datastore()
    if lock_service is None and CHECKOUT_LOCK_ENABLED:
        lock_service = LockService()
    storage = storage or ImageStorage()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # baza moze byc chwilowo niedostepna - serwer startuje, a /health i 503 to pokazuja
        if not datastore.connect():
            logger.warning("Starting without database, requests will get 503 until it is reachable")
        yield
        datastore.dispose()

    app = FastAPI(
        title="Storefront API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.datastore = datastore
    app.state.lock_service = lock_service
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    app.mount("/uploads", StaticFiles(directory=storage.directory), name="uploads")

    return app
