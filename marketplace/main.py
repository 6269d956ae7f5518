# marketplace/main.py
from fastapi import FastAPI
from marketplace.data.database import Base, engine, init_db
from marketplace.api.routers import users, products, carts, orders, health
from marketplace.utils.logging import get_logger
import uvicorn

logger = get_logger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Marketplace Order Service",
        version="1.0.0",
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app


try:
    init_db()
    logger.info(f"Database ready, tables: {list(Base.metadata.tables.keys())}")
except Exception as e:
    logger.error(f"Failed to create tables on {engine.url}: {e}")
    raise

app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
