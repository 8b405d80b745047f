"""Constants for OpenTelemetry metrics."""

# Metric name prefixes
METRIC_PREFIX = "skyblock_stats"

# Upstream API metrics
UPSTREAM_CALLS_TOTAL = f"{METRIC_PREFIX}.upstream.calls_total"
UPSTREAM_CALL_DURATION = f"{METRIC_PREFIX}.upstream.call_duration"

# Banner metrics
CARDS_RENDERED = f"{METRIC_PREFIX}.cards.rendered_total"
CARD_FAILURES = f"{METRIC_PREFIX}.cards.failures_total"

# Common label keys
LABEL_UPSTREAM_SERVICE = "upstream_service"
LABEL_STATUS_CODE = "status_code"
LABEL_ERROR_TYPE = "error_type"
LABEL_STAGE = "stage"
LABEL_DOWNSCALED = "downscaled"
