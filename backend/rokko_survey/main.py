# backend/rokko_survey/main.py

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rokko_survey.config import initialize_config, default_config_path, LOG_FORMAT
from rokko_survey.routers import dashboard, uploads
from rokko_survey.services.services import initialize_services, shutdown_services, health_check
from rokko_survey.utils.config import load_config

# Logging will be reconfigured by initialize_config
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

# --- FastAPI App Instance ---
app = FastAPI(
    title="Rokko / Maya Traffic Survey - Dashboard API",
    version="1.0.0",
    description="Per-day traffic, parking and weather data from the field devices, with session-scoped CSV overrides.",
)

# --- Exception Handlers ---
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Ensure all unhandled exceptions return JSON rather than HTML"""
    logger.exception("Unhandled exception occurred:")
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "type": "Internal Server Error"}
    )

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Convert HTTPExceptions to JSON format"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": "HTTP Exception"}
    )

# --- Event Handlers ---
@app.on_event("startup")
async def startup_event():
    logger.info("--- Starting Rokko Survey Backend ---")
    try:
        loaded_config = initialize_config()
    except Exception as e:
        logger.critical(f"CRITICAL FAILURE during config initialization: {e}", exc_info=True)
        raise RuntimeError(f"Configuration Initialization Failed: {e}") from e

    initialize_services(loaded_config)
    logger.info("Application startup complete.")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("--- Shutting down Rokko Survey Backend ---")
    shutdown_services()
    logger.info("--- Backend shutdown complete ---")

# --- CORS Middleware ---
origins = load_config(default_config_path()).get("cors", {}).get("origins", [])
app.add_middleware(CORSMiddleware, allow_origins=origins, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

# --- Include API Routers ---
app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["Dashboard"])
app.include_router(uploads.router, prefix="/api/v1/uploads", tags=["Uploads"])

@app.get("/api/v1/health", tags=["Health"])
async def get_health():
    return await health_check()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("rokko_survey.main:app", host="0.0.0.0", port=3002, reload=True)
