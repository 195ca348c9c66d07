"""Application constants."""

USER_AGENT = "manifest-reconciler/1.0 (+delivery routing; contact: configured-email)"
COMMANDS = ("reconcile", "inbox")
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
REPORT_SEPARATOR = "---------------------------------"
JSON_LOG_FIELDS = (
    "timestamp",
    "level",
    "run_id",
    "stage",
    "event",
    "status",
    "postal_code",
    "sequence",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
