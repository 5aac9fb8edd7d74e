import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from app.core.config import settings
from app.core.lookup.connection import connection_manager
from app.api.router import api_router

# Configure logging once for the whole app
logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)


# Drop the shared DynamoDB client once everything is done
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Entity lookup ready (region={settings.AWS_REGION})")
    yield
    connection_manager.reset()


app = FastAPI(title="Entity Lookup API", lifespan=lifespan)

# Include the master router containing all our endpoints
app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Welcome to the Entity Lookup API"}


@app.get("/health")
async def health():
    return {"status": "ok"}
