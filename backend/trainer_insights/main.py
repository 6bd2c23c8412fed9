"""
Trainer Insights — FastAPI Application

Entry point for the backend. It:
1. Creates the FastAPI app instance
2. Configures CORS for the dashboard frontend
3. Registers route handlers
4. Sets up startup/shutdown lifecycle events

Run with:
    uvicorn trainer_insights.main:app --reload --port 8000
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trainer_insights.config import settings
from trainer_insights.database import init_db
from trainer_insights.routers import admin, assessments, feedback, gamification, trainers

# Import models so SQLAlchemy registers them with Base.metadata
# before init_db() calls create_all().
import trainer_insights.models  # noqa: F401


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic (code before 'yield' runs on startup)."""
    print("🚀 Starting Trainer Insights API...")
    await init_db()
    print("✅ Database tables created/verified")
    if not settings.GAMIFICATION_ENABLED:
        print("⏸️  Gamification disabled — XP, streaks and badges will not be awarded")

    yield

    print("👋 Shutting down...")


app = FastAPI(
    title="Trainer Insights API",
    description="Assessment analytics for trainer performance: scores, trends, correlations and gamification",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(assessments.router)
app.include_router(trainers.router)
app.include_router(admin.router)
app.include_router(gamification.router)
app.include_router(feedback.router)


# --- Health Check Endpoints ---

@app.get("/", tags=["health"])
async def root():
    """Root endpoint — confirms the API is alive."""
    return {
        "service": "Trainer Insights",
        "status": "running",
        "version": "1.0.0",
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Detailed health check — verifies database connectivity."""
    from sqlalchemy import text

    from trainer_insights.database import AsyncSessionLocal

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "environment": settings.APP_ENV,
    }
