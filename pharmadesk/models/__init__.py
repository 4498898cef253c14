import importlib

from pharmadesk.models.expiry_alert import ExpiryAlert
from pharmadesk.models.inventory import CurrentInventory
from pharmadesk.models.medicine import Medicine
from pharmadesk.models.pharmacy import Pharmacy
from pharmadesk.models.purchase import Purchase, PurchaseItem
from pharmadesk.models.stock_transaction import StockTransaction
from pharmadesk.models.supplier import Supplier


def import_all_models() -> None:
    for module_name in (
        "pharmadesk.models.expiry_alert",
        "pharmadesk.models.inventory",
        "pharmadesk.models.medicine",
        "pharmadesk.models.pharmacy",
        "pharmadesk.models.purchase",
        "pharmadesk.models.stock_transaction",
        "pharmadesk.models.supplier",
    ):
        importlib.import_module(module_name)


__all__ = [
    "CurrentInventory",
    "ExpiryAlert",
    "Medicine",
    "Pharmacy",
    "Purchase",
    "PurchaseItem",
    "StockTransaction",
    "Supplier",
    "import_all_models",
]
