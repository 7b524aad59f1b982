"""Application constants."""

USER_AGENT = "crichow-dashboard/1.0 (+waste-collection monitoring)"
STAGES = (
    "clean",
    "summary",
    "groups",
    "categories",
    "materials",
    "extrapolate",
    "forecast",
)
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
MATERIAL_KEYS = ("hdpe", "pet", "pp", "paper", "metal", "glass")
QUANTITY_KEYS = ("wet_waste", "dry_waste", *MATERIAL_KEYS)
DATE_ORDERS = ("day_first", "month_first")
CLASSIFIER_POLICIES = ("name_list", "group_list")
HOUSEHOLD_COUNT_POLICIES = ("observed", "fixed")
REJECT_SAMPLE_LIMIT = 50
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "source",
    "event",
    "status",
    "rows_in",
    "rows_out",
    "error_code",
    "details",
    "message",
)
