from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from database import create_db_and_tables
from routers import recordings as recordings_router
from logging_config import get_logger
from config import settings
from storage import BlobStore

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Recordings Service starting up...")
    await create_db_and_tables()
    logger.info("Database tables created or already exist.")
    blob_store = BlobStore(settings.STORAGE_BASE_PATH, chunk_size=settings.STORAGE_CHUNK_SIZE)
    blob_store.ensure_root()
    app.state.blob_store = blob_store
    logger.info(f"Recording storage path configured at: {settings.STORAGE_BASE_PATH}")
    yield
    logger.info("Recordings Service shutting down...")

app = FastAPI(
    title="Recordings Service",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range", "Accept-Ranges", "Content-Length"],
)

app.include_router(recordings_router.router)

@app.get("/ping")
async def ping():
    return {"ping": "pong! from Recordings Service"}

@app.get("/")
async def read_root():
    return {"message": "Welcome to the Recordings Service API"}

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Recordings Service on {settings.RECORDINGS_HOST}:{settings.RECORDINGS_PORT}")
    uvicorn.run("main:app", host=settings.RECORDINGS_HOST, port=settings.RECORDINGS_PORT, reload=True)
