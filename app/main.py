from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from app.config import settings
from app.api.v1 import auth, sellers, admin, products
from app.services.storage_service import StorageService
from app.utils.logger import logger

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.APP_DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["Authentication"])
app.include_router(sellers.router, prefix=f"{settings.API_V1_PREFIX}/sellers", tags=["Sellers"])
app.include_router(admin.router, prefix=f"{settings.API_V1_PREFIX}/admin", tags=["Admin"])
app.include_router(products.router, prefix=f"{settings.API_V1_PREFIX}/products", tags=["Products"])

# Stored uploads are addressed by their random file name only
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/")
async def root():
    return {
        "message": "Udyam Union Backend API",
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.APP_VERSION
    }


def _scheduler_wanted() -> bool:
    return settings.SCHEDULER_ENABLED and settings.APP_ENV != "test"


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    StorageService.upload_root()

    # Start background job scheduler
    from app.core.scheduler import scheduler, setup_scheduled_tasks
    if _scheduler_wanted():
        setup_scheduled_tasks()
        scheduler.start()
        logger.info("Background job scheduler started")


@app.on_event("shutdown")
async def shutdown_event():
    from app.core.scheduler import scheduler

    if scheduler.running:
        scheduler.shutdown()
    logger.info("Shutting down application")
