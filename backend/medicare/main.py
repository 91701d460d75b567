import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from medicare.config import get_settings
from medicare.database import engine, Base
from medicare.exceptions import MedicareError
from medicare.logging_config import setup_logging
from medicare.routers import auth as auth_router
from medicare.routers import dashboard, doctors, functions, scan, visits, workers
import medicare.models  # noqa: F401  registers tables on Base.metadata

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: logging, then tables
    setup_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Medicare records API ready")
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Migrant Worker Health Records",
    description="QR-identified worker registration and doctor visit records",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class NoCacheMiddleware(BaseHTTPMiddleware):
    """Medical records must never be cached by browsers or proxies."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0"
        response.headers["Expires"] = "0"
        response.headers["Pragma"] = "no-cache"
        return response


app.add_middleware(NoCacheMiddleware)


@app.exception_handler(MedicareError)
async def medicare_error_handler(request: Request, exc: MedicareError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(functions.router, prefix="/api/functions", tags=["Provisioning"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(workers.router, prefix="/api/workers", tags=["Workers"])
app.include_router(visits.router, prefix="/api/visits", tags=["Visits"])
app.include_router(doctors.router, prefix="/api/doctors", tags=["Doctors"])
app.include_router(scan.router, prefix="/api/scan", tags=["Scan"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "medicare-records"}
