# app/api/__init__.py
from fastapi import FastAPI

from app.api.errors import register_exception_handlers
from app.api.routers import carts, health, orders, products


def create_app(lifespan=None) -> FastAPI:
    app = FastAPI(
        title="Cart Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app
