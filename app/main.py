import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import ALLOWED_ORIGINS, SECURITY_HEADERS_ENABLED
from .database import Base, engine
from .domain.billing.router import router as billing_router
from .domain.properties.router import router as properties_router
from .domain.tours.router import router as tours_router
from .rate_limiter import get_redis_client, is_redis_configured
from .routes.auth import router as auth_router
from .routes.chat import router as chat_router
from .routes.chat_analytics import router as chat_analytics_router
from .routes.drafts import router as drafts_router
from .routes.favorites import router as favorites_router
from .routes.market import router as market_router
from .routes.messages import router as messages_router
from .routes.neighborhoods import router as neighborhoods_router
from .routes.passkeys import router as passkeys_router
from .routes.search_history import router as search_history_router
from .routes.suggested_questions import router as suggested_questions_router
from .routes.verification import router as verification_router
from .security_headers import SecurityHeadersMiddleware
from .services.notification_service import notification_hub

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    if is_redis_configured():
        try:
            get_redis_client()
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed - caching and rate limiting use memory only: {e}")
    else:
        logger.info("Redis not configured - caching disabled, rate limiting in memory")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Inmobi API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors on the Authorization header to 401
    authentication errors; everything else stays a 422
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    if request.url.path.startswith("/api"):
        duration_ms = (time.time() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms"
        )
    return response


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["X-Api-Source", "Retry-After"],
)

app.include_router(auth_router)
app.include_router(passkeys_router)
app.include_router(properties_router)
app.include_router(tours_router)
app.include_router(favorites_router)
app.include_router(messages_router)
app.include_router(search_history_router)
app.include_router(drafts_router)
app.include_router(neighborhoods_router)
app.include_router(market_router)
app.include_router(chat_router)
app.include_router(chat_analytics_router)
app.include_router(suggested_questions_router)
app.include_router(verification_router)
app.include_router(billing_router)


@app.websocket("/ws")
async def notifications_websocket(websocket: WebSocket):
    """Live listing notifications filtered per client"""
    client = await notification_hub.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            await notification_hub.handle_message(client, raw)
    except WebSocketDisconnect:
        logger.debug("WebSocket client closed the connection")
    finally:
        notification_hub.disconnect(websocket)


@app.get("/")
def root():
    return {"message": "Inmobi API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
