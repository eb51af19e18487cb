# poliux/main.py
from fastapi import FastAPI

from .logging_setup import setup_logging, get_logger
from .middleware import RequestContextMiddleware
from .exception_handling import register_exception_handlers
from .lifespan import lifespan

from .routers import analysis, analytics, bills, campaigns, dashboard, health, newsfeed, reports, tracking

setup_logging()  # <-- set up logging ASAP
logger = get_logger("poliux.main")

app = FastAPI(title="PoliUX", version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestContextMiddleware)

register_exception_handlers(app)

# Include routers
app.include_router(health.router)
app.include_router(newsfeed.router)
app.include_router(analytics.router)
app.include_router(analysis.router)
app.include_router(bills.router)
app.include_router(tracking.router)
app.include_router(campaigns.router)
app.include_router(reports.router)
app.include_router(dashboard.router)
