# smartbazaar/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from smartbazaar import config
from smartbazaar.db import Base, engine
from smartbazaar.exceptions import SmartBazaarError
from smartbazaar.api.routes import router as api_router
from smartbazaar.utils import logger
import smartbazaar.models  # noqa: F401 ensure models are imported so tables are known

# create FastAPI instance
app = FastAPI(title="SmartBazaar")
app.include_router(api_router)


@app.exception_handler(SmartBazaarError)
def handle_domain_error(request: Request, exc: SmartBazaarError):
    if exc.status_code >= 500 or exc.status_code == 403:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


@app.on_event("startup")
def on_startup_create_tables():
    # Ensure database tables are created on startup
    Base.metadata.create_all(bind=engine)
    if config.ENABLE_SCHEDULER:
        from smartbazaar.scheduler import start_scheduler
        start_scheduler()


@app.on_event("shutdown")
def on_shutdown():
    if config.ENABLE_SCHEDULER:
        from smartbazaar.scheduler import stop_scheduler
        stop_scheduler()
