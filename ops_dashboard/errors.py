"""Exception hierarchy for the operations dashboard."""


class OpsDashboardError(Exception):
    """Base class for dashboard errors."""


class DuplicateNameError(OpsDashboardError, ValueError):
    """A skill or landscape with this name already exists."""


class InvalidNameError(OpsDashboardError, ValueError):
    """A skill or landscape name is empty."""


class DataImportError(OpsDashboardError, ValueError):
    """An import payload is malformed; nothing was merged."""
