from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import models  # noqa: F401
from app.api.errors import setup_error_handlers
from app.api.routes.auth import router as auth_router
from app.api.routes.cost_components import router as cost_components_router
from app.api.routes.expense_categories import router as expense_categories_router
from app.api.routes.operational_expenses import router as operational_expenses_router
from app.api.routes.price_schemes import router as price_schemes_router
from app.api.routes.product_costs import router as product_costs_router
from app.api.routes.products import router as products_router
from app.api.routes.sales import router as sales_router
from app.core.config import settings
from app.core.logging import setup_logging
from app.db.database import Base, engine

logger = setup_logging(settings.log_level, settings.log_format)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.database_auto_create:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured")
    logger.info("%s started", settings.app_name)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_error_handlers(app)

for router in (
    auth_router,
    products_router,
    cost_components_router,
    product_costs_router,
    price_schemes_router,
    expense_categories_router,
    operational_expenses_router,
    sales_router,
):
    app.include_router(router, prefix=settings.api_prefix)


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "ok"}
