from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # Counters register under the name without the _total suffix
        collectors = REGISTRY._names_to_collectors
        return collectors.get(name) or collectors[name.removesuffix("_total")]


REQUESTS_TOTAL = get_or_create_metric(
    "taskmind_requests_total",
    "Total HTTP requests",
    Counter,
    labelnames=["endpoint", "method", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "taskmind_request_latency_seconds",
    "HTTP request latency",
    Histogram,
    labelnames=["endpoint"],
)

TASKS_CREATED_TOTAL = get_or_create_metric(
    "taskmind_tasks_created_total", "Total tasks created", Counter
)

ENRICHMENT_CALLS_TOTAL = get_or_create_metric(
    "taskmind_enrichment_calls_total",
    "LLM enrichment calls by kind and outcome",
    Counter,
    labelnames=["kind", "outcome"],
)
