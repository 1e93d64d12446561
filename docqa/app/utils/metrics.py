"""Prometheus metrics for provider calls, ingestion and answering."""

from prometheus_client import Counter, Histogram

# Model provider metrics
provider_latency_ms = Histogram(
    "provider_latency_ms",
    "Model provider call latency in milliseconds",
    ["operation", "outcome"],
    buckets=[10, 50, 100, 250, 500, 1000, 2000, 5000, 10000, 30000],
)

provider_errors_total = Counter(
    "provider_errors_total",
    "Total model provider call failures",
    ["operation"],
)

# Ingestion metrics
documents_ingested_total = Counter(
    "documents_ingested_total",
    "Total documents ingested",
)

chunks_ingested_total = Counter(
    "chunks_ingested_total",
    "Total chunks embedded and stored",
)

# Answer metrics
questions_total = Counter(
    "questions_total",
    "Questions processed by outcome",
    ["outcome"],
)


class PrometheusProviderMetrics:
    """Prometheus-based provider metrics implementation."""

    def record_latency(self, operation: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        provider_latency_ms.labels(operation=operation, outcome=outcome).observe(latency_ms)

    def inc_error(self, operation: str) -> None:
        """Increment error counter."""
        provider_errors_total.labels(operation=operation).inc()
