"""
FastAPI application entry point for Pizza Tracker API.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from database import engine, Base, SessionLocal

# Import routers
from routers import profile, pizzas, ingredients, stats, groups, friends, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Pizza Tracker API",
    description="API for logging pizzas and comparing yourself with friends and groups",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    print("[INFO] Starting Pizza Tracker API...")

    # Create database tables if they don't exist
    # Note: In production, use Alembic migrations instead
    try:
        import models  # noqa: F401
        Base.metadata.create_all(bind=engine)
        print("[INFO] Database tables initialized")
    except SQLAlchemyError as e:
        print(f"[ERROR] Database initialization failed: {e}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    print("[INFO] Shutting down Pizza Tracker API...")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "message": "Pizza Tracker API is running",
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Detailed health check endpoint."""
    database = "connected"
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        database = "unavailable"
    finally:
        db.close()

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "database": database,
    }


# Include routers
app.include_router(profile.router, prefix="/api/profile", tags=["Profile"])
app.include_router(pizzas.router, prefix="/api/pizzas", tags=["Pizzas"])
app.include_router(ingredients.router, prefix="/api/ingredients", tags=["Ingredients"])
app.include_router(stats.router, prefix="/api/stats", tags=["Stats"])
app.include_router(groups.router, prefix="/api/groups", tags=["Groups"])
app.include_router(friends.router, prefix="/api/friends", tags=["Friends"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
