import logging

from fastapi import FastAPI

from kitchen.api.routes import food_supply, recipes
from kitchen.events.web_observers import start as start_event_observers

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(title="Kitchen Recipe Costing API")

# Include routers
app.include_router(recipes.router)
app.include_router(food_supply.router)


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers for web alerts when the app starts."""
    start_event_observers()
    logger.info("Web observers for food supply events started")


@app.get("/health")
def health():
    return {"status": "ok"}
