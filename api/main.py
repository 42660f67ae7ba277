"""
FastAPI adapter for the point-of-sale engine.

A thin presentation layer: it reads snapshots and forwards user intents to
the StateEngine, which stays the only owner of state.

Run with:
    uv run uvicorn api.main:app --reload

Then visit http://localhost:8000/docs for interactive API documentation.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from engine import reports
from engine.state_engine import ErrorKind, OperationResult, StateEngine
from shared.config import AppConfig, build_store, configure_logging
from shared.models import (
    AppSettings,
    NewCategory,
    NewProduct,
    NotificationRequest,
    Product,
    SaleRequest,
)
from shared.seed import EMOJI_OPTIONS

logger = logging.getLogger("pos_api")


# Declined operations map onto these status codes
ERROR_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INSUFFICIENT_STOCK: 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the engine from the environment unless one was provided."""
    config: AppConfig = getattr(app.state, "config", None) or AppConfig.from_env()
    configure_logging(config.log_level)
    if getattr(app.state, "engine", None) is None:
        app.state.engine = StateEngine(build_store(config))
    logger.info(f"POS API started (store={config.store})")
    yield
    logger.info("Shutting down")


def create_app(engine: Optional[StateEngine] = None, config: Optional[AppConfig] = None) -> FastAPI:
    """
    Create the application.

    Args:
        engine: Engine to serve. Built from config at startup when omitted.
        config: Configuration. Read from POS_* variables when omitted.
    """
    application = FastAPI(
        title="POS Pro",
        description="Catalog, inventory, sales and notifications for a single shop.",
        version="1.0.0",
        lifespan=lifespan,
    )
    application.state.engine = engine
    application.state.config = config
    _register_routes(application)
    return application


def get_engine(request: Request) -> StateEngine:
    """Dependency: the engine owned by the running app."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


def _respond(result: OperationResult) -> JSONResponse:
    status_code = 200 if result.success else ERROR_STATUS[result.error]
    return JSONResponse(
        status_code=status_code,
        content=result.model_dump(mode="json", by_alias=True),
    )


def _dump(records) -> list[dict[str, Any]]:
    return [r.model_dump(mode="json", by_alias=True) for r in records]


def _register_routes(app: FastAPI) -> None:

    # =========================================================================
    # Health & snapshots
    # =========================================================================

    @app.get("/health", tags=["Health"])
    def health_check():
        return {"status": "healthy", "service": "pos-state-engine"}

    @app.get("/state", tags=["State"])
    def get_state(engine: StateEngine = Depends(get_engine)):
        """The whole state in one document."""
        return engine.snapshot().model_dump(mode="json", by_alias=True)

    @app.get("/categories", tags=["State"])
    def list_categories(engine: StateEngine = Depends(get_engine)):
        return _dump(engine.categories)

    @app.get("/products", tags=["State"])
    def list_products(engine: StateEngine = Depends(get_engine)):
        return _dump(engine.products)

    @app.get("/sales", tags=["State"])
    def list_sales(engine: StateEngine = Depends(get_engine)):
        return _dump(engine.sales)

    @app.get("/notifications", tags=["State"])
    def list_notifications(engine: StateEngine = Depends(get_engine)):
        return _dump(engine.notifications)

    @app.get("/settings", tags=["State"])
    def get_settings(engine: StateEngine = Depends(get_engine)):
        return engine.settings.model_dump(mode="json", by_alias=True)

    # =========================================================================
    # Operations
    # =========================================================================

    @app.post("/categories", tags=["Categories"])
    def add_category(body: NewCategory, engine: StateEngine = Depends(get_engine)):
        return _respond(engine.add_category(body.name, body.icon))

    @app.delete("/categories/{category_id}", tags=["Categories"])
    def delete_category(category_id: str, engine: StateEngine = Depends(get_engine)):
        return _respond(engine.delete_category(category_id))

    @app.post("/products", tags=["Products"])
    def add_product(body: NewProduct, engine: StateEngine = Depends(get_engine)):
        return _respond(engine.add_product(**body.model_dump()))

    @app.put("/products/{product_id}", tags=["Products"])
    def update_product(product_id: str, body: Product, engine: StateEngine = Depends(get_engine)):
        """Replace a product. The body must carry the same id as the path."""
        if body.id != product_id:
            raise HTTPException(
                status_code=400,
                detail=f"Body id {body.id} does not match path id {product_id}",
            )
        return _respond(engine.update_product(body))

    @app.delete("/products/{product_id}", tags=["Products"])
    def delete_product(product_id: str, engine: StateEngine = Depends(get_engine)):
        return _respond(engine.delete_product(product_id))

    @app.post("/sales", tags=["Sales"])
    def add_sale(body: SaleRequest, engine: StateEngine = Depends(get_engine)):
        return _respond(engine.add_sale(body.product_id, body.quantity))

    @app.put("/settings", tags=["Settings"])
    def update_settings(body: AppSettings, engine: StateEngine = Depends(get_engine)):
        return _respond(engine.update_settings(body))

    @app.post("/notifications", tags=["Notifications"])
    def add_notification(body: NotificationRequest, engine: StateEngine = Depends(get_engine)):
        return _respond(engine.add_notification(body.message, body.type))

    # =========================================================================
    # Derived figures
    # =========================================================================

    @app.get("/reports/summary", tags=["Reports"])
    def report_summary(engine: StateEngine = Depends(get_engine)):
        products = engine.products
        return {
            "sales": reports.sales_summary(engine.sales).model_dump(),
            "inventory": reports.inventory_value(products).model_dump(),
            "lowStock": [p.id for p in reports.low_stock_products(products)],
            "outOfStock": [p.id for p in reports.out_of_stock_products(products)],
            "topSellers": [p.id for p in reports.top_selling_products(products)],
            "revenueByCategory": reports.sales_by_category(
                engine.sales, products, engine.categories
            ),
        }

    @app.get("/format-currency", tags=["Utilities"])
    def format_currency(amount: float, engine: StateEngine = Depends(get_engine)):
        try:
            formatted = engine.format_currency(amount)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return {"amount": amount, "formatted": formatted}

    @app.get("/icons", tags=["Utilities"])
    def list_icons():
        """Emoji choices offered when creating a category."""
        return EMOJI_OPTIONS


app = create_app()


def run(config: Optional[AppConfig] = None) -> None:
    """Start the API server."""
    config = config or AppConfig.from_env()
    app.state.config = config
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    run()
