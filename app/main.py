# app/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from app.api import create_app
from app.data.database import SessionLocal, init_db
from app.data.seed import seed_products
from app.utils.logging import configure_logging, get_logger
from app.utils.settings import SEED_PRODUCTS

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database")
    init_db()

    if SEED_PRODUCTS:
        db = SessionLocal()
        try:
            seed_products(db)
        finally:
            db.close()
    yield


app = create_app(lifespan=lifespan)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
