from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging
from config import get_settings
from services.validation import InputValidationError
from api.routes.content import router as content_router
from api.routes.sessions import router as sessions_router

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("clarify")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Clarify API...")
    if not settings.GROQ_API_KEY:
        logger.warning("GROQ_API_KEY is not set; model calls will fail.")
    yield
    # Shutdown
    logger.info("Shutting down Clarify API...")


app = FastAPI(
    title="Clarify API",
    description="Simplify, translate, explain and read aloud complex text",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Errors are returned as {"error": message}
@app.exception_handler(InputValidationError)
async def input_validation_error_handler(request: Request, exc: InputValidationError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Rejected request body for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


# Routers
app.include_router(content_router)
app.include_router(sessions_router)


@app.get("/health")
async def health():
    return {"status": "ok", "service": "clarify"}
