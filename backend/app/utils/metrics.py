"""Prometheus metrics for plan generation and itinerary edits."""

from prometheus_client import Counter, Histogram

llm_latency_ms = Histogram(
    "llm_latency_ms",
    "Structured completion latency in milliseconds",
    ["model", "outcome"],
    buckets=[500, 1000, 2000, 5000, 10000, 20000, 40000, 60000, 120000],
)

plan_generation_total = Counter(
    "plan_generation_total",
    "Total plan generation attempts by outcome",
    ["outcome"],
)

activity_mutations_total = Counter(
    "activity_mutations_total",
    "Total itinerary item mutations",
    ["operation"],
)


class PrometheusGenerationMetrics:
    """Prometheus-based generation metrics implementation."""

    def record_llm_latency(self, model: str, outcome: str, latency_ms: float) -> None:
        """Record structured completion latency."""
        llm_latency_ms.labels(model=model, outcome=outcome).observe(latency_ms)

    def inc_generation(self, outcome: str) -> None:
        """Increment generation outcome counter."""
        plan_generation_total.labels(outcome=outcome).inc()

    def inc_activity_mutation(self, operation: str) -> None:
        """Increment item mutation counter."""
        activity_mutations_total.labels(operation=operation).inc()
