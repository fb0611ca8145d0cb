import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from db import create_db_and_tables, engine
from utils.error_handler import register_exception_handlers
from web.orders_router import orders_router
from web.payment_router import payment_router
from web.products_router import products_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    # Startup
    await create_db_and_tables()
    logging.info(f"[Startup] Storefront API ready ({config.RUNTIME_ENVIRONMENT.value}, "
                 f"price source: {config.ORDER_PRICE_SOURCE.value})")

    yield

    # Shutdown
    logging.warning('Shutting down..')
    await engine.dispose()
    logging.warning('Bye!')


def create_app() -> FastAPI:
    new_app = FastAPI(title="Storefront API", lifespan=lifespan)

    if config.CORS_ALLOWED_ORIGINS:
        new_app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ALLOWED_ORIGINS,
            allow_credentials=False,
            allow_methods=["GET", "POST", "PUT", "DELETE"],
            allow_headers=["Content-Type", "Authorization"],
        )
        logging.info(f"[Startup] CORS middleware enabled for origins: {config.CORS_ALLOWED_ORIGINS}")
    else:
        logging.debug("[Startup] CORS middleware disabled (no allowed origins configured)")

    register_exception_handlers(new_app)

    new_app.include_router(products_router)
    new_app.include_router(orders_router)
    new_app.include_router(payment_router)

    # Health check endpoint (for Docker container monitoring)
    @new_app.get("/health")
    async def health_check():
        """Health check endpoint for Docker healthcheck."""
        return {"status": "healthy"}

    return new_app


app = create_app()
