"""No-op Prometheus stub used until metrics are enabled"""


class NoOpMetric:
    """No-op metric that accepts any method call and does nothing."""

    def __call__(self, *args, **kwargs):
        return self

    def __getattr__(self, name):
        return self

    def inc(self, *args, **kwargs):
        pass

    def observe(self, *args, **kwargs):
        pass

    def labels(self, *args, **kwargs):
        return self


# Create no-op instances for all metrics
parse_runs_total = NoOpMetric()
detections_total = NoOpMetric()
lines_total = NoOpMetric()
parse_duration_seconds = NoOpMetric()
detection_duration_seconds = NoOpMetric()


# No-op helper functions
def record_parse_run(*args, **kwargs):
    pass


def record_detection(*args, **kwargs):
    pass
