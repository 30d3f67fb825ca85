"""Coaching Insights API - FastAPI application entry point."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .routes import insights, sessions, records

settings = get_settings()

app = FastAPI(
    title="Coaching Insights API",
    description="Read-only API for client training insights and progress analytics",
    version="1.0.0",
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Include routers
app.include_router(insights.router)
app.include_router(sessions.router)
app.include_router(records.router)


@app.get("/health")
async def health_check():
    """Health check endpoint for the API."""
    return {"status": "healthy", "service": "coaching-api"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "server.coaching_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
