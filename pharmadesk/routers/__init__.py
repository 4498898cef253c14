from pharmadesk.routers.dashboard import router as dashboard_router
from pharmadesk.routers.expiry import router as expiry_router
from pharmadesk.routers.health import router as health_router
from pharmadesk.routers.inventory import router as inventory_router
from pharmadesk.routers.medicines import router as medicines_router
from pharmadesk.routers.purchases import router as purchases_router
from pharmadesk.routers.suppliers import router as suppliers_router

__all__ = [
    "dashboard_router",
    "expiry_router",
    "health_router",
    "inventory_router",
    "medicines_router",
    "purchases_router",
    "suppliers_router",
]
