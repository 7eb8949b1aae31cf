"""
Main FastAPI application
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import json
import time

from transit_scheduler.config.database import db_config
from transit_scheduler.config.settings import settings
from transit_scheduler.routes import transport, vehicles, schedules, trips


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events"""
    # Startup
    await db_config.connect_db()
    await db_config.ensure_indexes()
    print(f"🚀 {settings.APP_NAME} v{settings.VERSION} started")
    yield
    # Shutdown
    await db_config.close_db()
    print("👋 Application shutdown")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = None
    try:
        body = await request.json()
    except Exception:
        pass
    # Round-trip through json with default=str to handle non-serializable objects (e.g. ValueError)
    safe_errors = json.loads(json.dumps(exc.errors(), default=str))
    if settings.DEBUG:
        print("\n" + "="*60)
        print(f"❌ 422 VALIDATION ERROR on {request.method} {request.url.path}")
        print(f"📋 ERRORS: {json.dumps(safe_errors, indent=2)}")
        if body:
            print(f"📦 BODY SENT: {json.dumps(body, indent=2, default=str)}")
        print("="*60 + "\n")
    return JSONResponse(status_code=422, content={"detail": safe_errors})

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    if settings.DEBUG:
        print(f"✅ {request.method} {request.url.path} - {response.status_code} ({duration:.2f}s)")
    return response

# Include routers
app.include_router(transport.router, prefix="/api")
app.include_router(vehicles.router, prefix="/api")
app.include_router(schedules.router, prefix="/api")
app.include_router(trips.router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "app": settings.APP_NAME,
        "version": settings.VERSION,
        "status": "running"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}
