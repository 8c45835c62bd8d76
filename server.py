import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from microservices.notification_microservice import NotificationFeed
from routes.auth_route import router as auth_router
from routes.cart_route import router as cart_router
from routes.notifications_route import router as notifications_router
from routes.orders_route import confirmation_router, router as orders_router
from services.auth_service import SessionIdentityProvider
from services.cart_service import CartStore, default_client_factory
from storagemanager import default_storage

logger = logging.getLogger("cumall")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Cart service starting with %d saved lines", len(app.state.cart_store.items))
    yield
    logger.info("Cart service shutting down")


def create_app(storage=None, client_factory=default_client_factory) -> FastAPI:
    app = FastAPI(title="CU Mall Cart", lifespan=lifespan)

    # one store per app, handed to routes through dependencies
    app.state.session = SessionIdentityProvider()
    app.state.notifications = NotificationFeed()
    app.state.cart_store = CartStore(
        storage if storage is not None else default_storage(),
        identity_provider=app.state.session,
        notification_sink=app.state.notifications,
        client_factory=client_factory,
    )

    app.include_router(auth_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(confirmation_router)
    app.include_router(notifications_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def connection():
        return {"message": "Connected Successfully"}

    return app


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
app = create_app()
