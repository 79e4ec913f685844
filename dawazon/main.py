# dawazon/main.py
from contextlib import asynccontextmanager

import requests
import uvicorn
from fastapi import FastAPI

from dawazon.api.errors import cart_error_handler, catalog_unavailable_handler
from dawazon.api.routers import carts, health, orders, sales, users
from dawazon.data.database import init_db
from dawazon.domain.errors import CartError
from dawazon.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database")
    init_db()
    yield


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Dawazon Cart Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(CartError, cart_error_handler)
    app.add_exception_handler(requests.RequestException, catalog_unavailable_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(sales.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
