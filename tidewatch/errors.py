"""Exception types raised by the exploration engine.

Reference misses (unknown seeds, dangling relationship endpoints) are
never raised; they are filtered where they occur and logged.
"""


class TidewatchError(Exception):
    """Base class for all Tidewatch errors."""


class GraphLoadError(TidewatchError):
    """Raised when the graph document cannot be fetched or parsed. Fatal."""


class ProjectionLoadError(TidewatchError):
    """Raised by the strict projection parser; callers degrade to an empty map."""


class DragError(TidewatchError):
    """Raised on an invalid drag gesture (second pin, unknown entity)."""
