"""
Metrics Collection
Prometheus metrics for streaming, export, action and validation activity
"""

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the engine.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        self.registry = registry

        # Streaming metrics
        self.stream_sessions_total = Counter(
            "jsonui_stream_sessions_total",
            "Streaming sessions by final state",
            ["outcome"],
            registry=registry,
        )
        self.stream_fragments_total = Counter(
            "jsonui_stream_fragments_total",
            "Fragments consumed by tree builders",
            registry=registry,
        )
        self.stream_patches_total = Counter(
            "jsonui_stream_patches_total",
            "Patches emitted by tree builders",
            ["op"],
            registry=registry,
        )
        self.stream_duration = Histogram(
            "jsonui_stream_duration_seconds",
            "Streaming session duration in seconds",
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
            registry=registry,
        )

        # Export metrics
        self.export_total = Counter(
            "jsonui_export_total",
            "Code exports by cache result",
            ["cache"],
            registry=registry,
        )
        self.export_duration = Histogram(
            "jsonui_export_duration_seconds",
            "Code generation duration in seconds",
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
            registry=registry,
        )

        # Action metrics
        self.actions_total = Counter(
            "jsonui_actions_total",
            "Action dispatches by status",
            ["status"],
            registry=registry,
        )

        # Validation metrics
        self.validation_runs_total = Counter(
            "jsonui_validation_runs_total",
            "Field validations by result",
            ["result"],
            registry=registry,
        )

    def record_stream_outcome(self, outcome: str, duration: float) -> None:
        """Record a finished streaming session."""
        self.stream_sessions_total.labels(outcome=outcome).inc()
        self.stream_duration.observe(duration)

    def record_fragment(self) -> None:
        """Record a consumed fragment."""
        self.stream_fragments_total.inc()

    def record_patch(self, op: str) -> None:
        """Record an emitted patch."""
        self.stream_patches_total.labels(op=op).inc()

    def record_export(self, cache: str, duration: float) -> None:
        """Record a code export."""
        self.export_total.labels(cache=cache).inc()
        self.export_duration.observe(duration)

    def record_action(self, status: str) -> None:
        """Record an action dispatch."""
        self.actions_total.labels(status=status).inc()

    def record_validation(self, result: str) -> None:
        """Record a field validation."""
        self.validation_runs_total.labels(result=result).inc()

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        return generate_latest(self.registry)


# Global metrics collector instance
metrics_collector = MetricsCollector()
