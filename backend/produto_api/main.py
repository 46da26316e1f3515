import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware

from produto_api.config import Config
from produto_api.db.database import Database
from produto_api.exceptions import register_exception_handlers
from produto_api.limiter import limiter as default_limiter
from produto_api.middleware import register_middleware
from produto_api.routers import health, produtos

# Configure logging
logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = Database()
    await db.connect()
    if Config.CREATE_SCHEMA:
        await db.create_schema()
    app.state.db = db
    logger.info(f"Produtos API started on port {Config.PORT}")
    yield
    await db.disconnect()
    logger.info("Produtos API shut down")


def create_app(limiter: Limiter | None = None) -> FastAPI:
    app = FastAPI(
        title="Produtos API",
        version="1.0.0",
        description="A simple CRUD API for products",
        lifespan=lifespan
    )

    app.state.limiter = limiter or default_limiter

    # Register exception handlers
    register_exception_handlers(app)

    # Outermost last: access log wraps security headers wraps rate limiting
    app.add_middleware(SlowAPIMiddleware)
    register_middleware(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(produtos.router)
    return app


app = create_app()
