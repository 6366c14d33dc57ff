# marketplace/api/__init__.py
import os

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from marketplace.api.routers import carts, health, notifications, orders, products, uploads, users
from marketplace.utils.settings import BLOB_STORAGE_DIR


def create_app() -> FastAPI:
    app = FastAPI(
        title="Marketplace Order Service",
        version="1.0.0",
    )

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(notifications.router)
    app.include_router(uploads.router)

    #uploaded slips and images are served from here
    os.makedirs(BLOB_STORAGE_DIR, exist_ok=True)
    app.mount("/blobs", StaticFiles(directory=BLOB_STORAGE_DIR), name="blobs")

    return app
