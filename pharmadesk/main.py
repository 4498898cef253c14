from fastapi import FastAPI

from pharmadesk.config import Settings, get_settings
from pharmadesk.core.logging import setup_logging
from pharmadesk.database import Base, engine, ensure_sqlite_schema
from pharmadesk.models import import_all_models
from pharmadesk.routers import (
    dashboard_router,
    expiry_router,
    health_router,
    inventory_router,
    medicines_router,
    purchases_router,
    suppliers_router,
)

setup_logging()
settings: Settings = get_settings()

import_all_models()
Base.metadata.create_all(bind=engine)
ensure_sqlite_schema()

app = FastAPI(title=settings.APP_NAME)

app.include_router(health_router)
app.include_router(purchases_router)
app.include_router(expiry_router)
app.include_router(inventory_router)
app.include_router(suppliers_router)
app.include_router(medicines_router)
app.include_router(dashboard_router)


__all__ = ["app"]
