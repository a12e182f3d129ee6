# hapibara/api/__init__.py
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from hapibara.api.errors import register_error_handlers
from hapibara.api.routers import cart, health, impact, orders, users
from hapibara.utils.logging import add_context, clear_context


def create_app() -> FastAPI:
    app = FastAPI(
        title="HapiBara Store API",
        description="Cart, orders and kindness impact tracking",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        clear_context()
        request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
        add_context(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(cart.router)
    app.include_router(orders.router)
    app.include_router(impact.router)

    return app
