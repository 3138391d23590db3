import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import APP_NAME, APP_VERSION, CORS_ORIGINS, LOG_LEVEL, SERVER_HOST, SERVER_PORT
from app.core.logging_config import configure_logging
from app.db.database import close_database_connection, init_indexes, test_connection
from app.router.itinerary import router as itinerary_router
from app.router.nft import router as nft_router
from app.router.planning import router as planning_router
from app.router.profile import router as profile_router
from app.router.system import router as system_router

configure_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up %s...", APP_NAME)
    if await test_connection():
        await init_indexes()
    yield
    logger.info("Shutting down %s...", APP_NAME)
    await close_database_connection()


app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(system_router)
app.include_router(planning_router)
app.include_router(itinerary_router)
app.include_router(profile_router)
app.include_router(nft_router)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT)
