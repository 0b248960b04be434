"""
FastAPI Application Entry Point
Main application setup and route registration
"""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from app.config import settings
from app.database import connect_db, disconnect_db
from app.exceptions import CertificateRenderError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Certificate template designer and batch renderer",
    version="1.0.0",
    debug=settings.DEBUG
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Failed-Members"],
)


# A render either produces a complete certificate or fails outright
@app.exception_handler(CertificateRenderError)
async def render_error_handler(request: Request, exc: CertificateRenderError):
    logger.warning("Render failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# Uploaded template images
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


# Startup event
@app.on_event("startup")
async def startup():
    """Run on application startup"""
    await connect_db()
    logger.info("[START] %s started in %s mode", settings.APP_NAME, settings.APP_ENV)


# Shutdown event
@app.on_event("shutdown")
async def shutdown():
    """Run on application shutdown"""
    await disconnect_db()
    logger.info("[STOP] %s shut down", settings.APP_NAME)


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": "1.0.0"
    }


# Import and include routers
from app.routes import templates, members, certificates, data  # noqa: E402

app.include_router(templates.router, prefix="/templates", tags=["Templates"])
app.include_router(members.router, prefix="/templates/{template_id}/members", tags=["Members"])
app.include_router(certificates.router, prefix="/templates", tags=["Certificates"])
app.include_router(data.router, prefix="/templates", tags=["Data"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True  # Auto-reload on code changes
    )
