"""Package version and instrumentation scope name."""

from importlib.metadata import PackageNotFoundError, version

INSTRUMENTATION_NAME = "otelkafka"

try:
    __version__ = version("otelkafka")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"


def sem_version() -> str:
    """Semantic version of the instrumentation, reported on every tracer and meter."""
    return __version__


__all__ = ["INSTRUMENTATION_NAME", "__version__", "sem_version"]
