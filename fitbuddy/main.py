# main.py
import logging
from fastapi import FastAPI
from fastapi.routing import APIRoute
from contextlib import asynccontextmanager
from fitbuddy.database import database
from fitbuddy.routers import (
    profile,
    workouts,
    meals,
    progress,
    recommendations,
    chat,
    coach,
    onboarding
)
# Registers the tables on Base.metadata
from fitbuddy.models import models  # noqa: F401

logger = logging.getLogger(__name__)


# ---------------- Lifespan context ----------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handles startup and shutdown events.
    Creates all tables on startup and logs the registered routes.
    """
    database.Base.metadata.create_all(bind=database.engine)

    logger.info("ROUTES REGISTERED:")
    for route in app.routes:
        if isinstance(route, APIRoute):
            methods = ",".join(sorted(route.methods))
            logger.info("%-10s -> %s", methods, route.path)

    yield


# ---------------- FastAPI instance ----------------
app = FastAPI(title="Fit Buddy", lifespan=lifespan)


@app.get("/ping", tags=["Health"])
def ping():
    return {"status": "ok"}


# ---------------- Include routers ----------------
app.include_router(profile.router)
app.include_router(workouts.router)
app.include_router(meals.router)
app.include_router(progress.router)
app.include_router(recommendations.router)
app.include_router(chat.router)
app.include_router(coach.router)
app.include_router(onboarding.router)
