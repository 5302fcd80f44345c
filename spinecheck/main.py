import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from spinecheck.config import settings
from spinecheck.database import create_tables
from spinecheck.dependencies import get_credentials, get_storage
from spinecheck.routers.analyses import router as analyses_router
from spinecheck.routers.consultations import router as consultations_router
from spinecheck.routers.history import router as history_router
from spinecheck.routers.settings import router as settings_router
from spinecheck.utils.exceptions import register_exception_handlers

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    credentials = get_credentials(settings, get_storage())
    if credentials.environment_key_detected():
        logger.info("API key found in environment")
    elif credentials.saved_value():
        logger.info("Using saved API key %s", credentials.masked())
    else:
        logger.warning("No API key configured; users must enter one in settings")
    yield


app = FastAPI(
    title="SpineCheck",
    description="척추측만증 AI 분석: 등 사진으로 콥스 각도를 추정합니다",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(analyses_router, prefix="/api/v1")
app.include_router(history_router, prefix="/api/v1")
app.include_router(settings_router, prefix="/api/v1")
app.include_router(consultations_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "success", "data": {"service": "spinecheck", "version": "0.1.0"}, "message": None}
