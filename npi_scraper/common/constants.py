"""Application constants."""

USER_AGENT = "npi-scraper/1.0 (+research; contact: configured-email)"
REGISTRY_URL_TEMPLATE = "https://npiregistry.cms.hhs.gov/registry/provider-view/{npi}"
NOT_FOUND_HEADING = "404 Page Not Found"
COMMANDS = (
    "crawl",
    "extract",
    "build-catalog",
)
OUTPUT_FORMATS = ("json", "xlsx", "csv")
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "npi",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
