# theratrack backend api
# fastapi app with async mongodb, jwt auth, and the plan/report approval workflow

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.errors import WorkflowError
from app.services.db import db
from app.routers import auth, users, patients, therapy_plans, progress_reports, ratings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: connect to mongodb. shutdown: close connection."""
    logger.info("Starting TheraTrack backend...")
    await db.connect()
    logger.info("TheraTrack backend ready")
    yield
    logger.info("Shutting down TheraTrack backend...")
    await db.close()


app = FastAPI(
    title="TheraTrack API",
    description="Backend API for speech-therapy practices: patients, therapy plans, progress reports, clinical ratings, supervisor review",
    version="0.1.0",
    lifespan=lifespan,
)

# cors: allow frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    """render workflow errors with their status code and structured detail"""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


# register routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(patients.router)
app.include_router(therapy_plans.router)
app.include_router(progress_reports.router)
app.include_router(ratings.router)


@app.get("/health")
async def health_check():
    """basic health check endpoint"""
    return {"status": "ok", "service": "theratrack-api"}
