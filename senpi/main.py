from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import actions, health
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

setup_logging()

app = FastAPI(
    title="Senpi Agent API",
    description="Trading agent actions for Senpi on Base",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(actions.router, tags=["Actions"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Senpi Agent API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/healthz",
        "plugins": "/plugins",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "senpi.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
