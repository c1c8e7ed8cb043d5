# Run from project root: uvicorn app.main:app --reload

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import router
from app.core.config import LOG_LEVEL
from app.db.database import init_db
from app.mcp.server import mcp_router

logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Waste Collection Assistant", lifespan=lifespan)
app.include_router(router)
app.include_router(mcp_router, prefix="/mcp")
