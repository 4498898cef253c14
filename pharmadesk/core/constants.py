EXPIRY_STATUSES = ("EXPIRED", "CRITICAL", "WARNING", "ALERT", "NORMAL")

# Upper bound (inclusive) of days-to-expiry for each tier; NORMAL is open-ended.
EXPIRY_TIER_LIMITS = (
    (0, "EXPIRED"),
    (30, "CRITICAL"),
    (60, "WARNING"),
    (90, "ALERT"),
)

EXPIRED_LOOKBACK_DAYS = 7
EXPIRY_STATS_WINDOWS = (30, 90)

UNKNOWN_SUPPLIER = "Unknown"
UNKNOWN_MEDICINE = "Unknown Medicine"
AUTO_BATCH_PREFIX = "AUTO-"

DEFAULT_UNIT_TYPE = "strips"
DEFAULT_MANUFACTURER = "Unknown"
AUTO_SUPPLIER_CONTACT = "Auto-created"

PURCHASE_STATUS_RECEIVED = "received"
TRANSACTION_TYPE_PURCHASE = "purchase"
