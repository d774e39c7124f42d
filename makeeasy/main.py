import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger
from tortoise import Tortoise

from makeeasy import settings
from makeeasy.context import build_context
from makeeasy.errors import register_exception_handlers
from makeeasy.routers import (
    about,
    addons,
    auth,
    banners,
    bookings,
    cart,
    categories,
    kyc,
    locations,
    orders,
    products,
    rentals,
    service_requests,
    services,
)
from makeeasy.seed import bootstrap

ROUTERS = (
    auth,
    categories,
    products,
    services,
    addons,
    banners,
    locations,
    about,
    cart,
    orders,
    bookings,
    rentals,
    service_requests,
    kyc,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await Tortoise.init(
        db_url=settings.db_url,
        modules={"models": ["makeeasy.models"]},
        use_tz=True,
    )
    await Tortoise.generate_schemas(safe=True)
    if settings.seed_db:
        await bootstrap()
    logger.info("makeeasy started (db={})", settings.db_url.split("://", 1)[0])
    yield
    await Tortoise.close_connections()


def create_app() -> FastAPI:
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    app = FastAPI(title="MakeEasy API", lifespan=lifespan)
    app.state.context = build_context(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    uploads = Path(settings.upload_dir)
    uploads.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=uploads), name="uploads")

    register_exception_handlers(app)
    for module in ROUTERS:
        app.include_router(module.router)

    @app.get("/", tags=["health"])
    async def root() -> dict:
        return {"success": True, "message": "MakeEasy API is running"}

    return app


app = create_app()
