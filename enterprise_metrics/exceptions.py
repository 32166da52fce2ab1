"""Domain-specific exceptions with user-ready messages."""

from collections.abc import Sequence


class ConfigurationError(Exception):
    """Raised when application configuration is invalid."""

    pass


class MetricsRegistryError(Exception):
    """Base class for metrics registry errors.

    These are programmer errors raised while defining metrics or resolving
    series. They are caught at startup or in tests and never reach clients.
    """

    pass


class DuplicateMetricError(MetricsRegistryError):
    """Raised when a metric name is defined twice in the same registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Metric {name!r} is already registered")


class InvalidDefinitionError(MetricsRegistryError):
    """Raised when a metric definition is malformed."""

    def __init__(self, name: str, cause: str) -> None:
        self.name = name
        self.cause = cause
        super().__init__(f"Invalid definition for metric {name!r}: {cause}")


class LabelCardinalityError(MetricsRegistryError):
    """Raised when label values do not match a metric's declared label names."""

    def __init__(
        self, name: str, label_names: Sequence[str], label_values: Sequence[str]
    ) -> None:
        self.name = name
        self.label_names = tuple(label_names)
        self.label_values = tuple(label_values)
        super().__init__(
            f"Metric {name!r} expects {len(self.label_names)} label value(s) "
            f"{list(self.label_names)}, got {len(self.label_values)}"
        )


class UnknownMetricError(MetricsRegistryError):
    """Raised when a series is requested for a metric that was never defined."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Metric {name!r} is not registered")


class InvalidObservationError(MetricsRegistryError):
    """Raised when an observation violates the metric kind's rules."""

    def __init__(self, name: str, cause: str) -> None:
        self.name = name
        self.cause = cause
        super().__init__(f"Cannot record on metric {name!r}: {cause}")
