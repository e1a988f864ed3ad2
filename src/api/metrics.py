from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # Counters register under the base name without the _total suffix
        collectors = REGISTRY._names_to_collectors
        return collectors.get(name) or collectors[name.removesuffix("_total")]


REQUESTS_TOTAL = get_or_create_metric(
    "shift_sync_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "shift_sync_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

SHIFTS_EXTRACTED_TOTAL = get_or_create_metric(
    "shift_sync_shifts_extracted_total", "Valid shifts extracted from schedule images", Counter
)

SHIFTS_DROPPED_TOTAL = get_or_create_metric(
    "shift_sync_shifts_dropped_total", "Extracted shift records dropped by validation", Counter
)

CONFLICTS_DETECTED_TOTAL = get_or_create_metric(
    "shift_sync_conflicts_detected_total", "Shifts overlapping an existing calendar event", Counter
)

EVENTS_INSERTED_TOTAL = get_or_create_metric(
    "shift_sync_events_inserted_total",
    "Calendar insert requests by outcome",
    Counter,
    labelnames=["status"],
)
