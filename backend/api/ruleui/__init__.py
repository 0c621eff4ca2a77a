"""Web UI for browsing alerting and recording rules of a rule evaluator."""

__version__ = "0.1.0"
