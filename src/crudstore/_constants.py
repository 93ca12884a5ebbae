"""Internal constants shared across the library."""

USER_AGENT = "crudstore/aiohttp"
DEFAULT_ID_FIELD = "id"
DEFAULT_TIMEOUT_S = 30.0

# Keys of a paginated list envelope: ``{"results": [...], "count": N}``.
ENVELOPE_RESULTS_KEY = "results"
ENVELOPE_COUNT_KEY = "count"
