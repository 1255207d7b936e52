class SyncError(Exception):
    """Base class for sync failures surfaced to the caller."""


class SyncValidationError(SyncError, ValueError):
    """Request rejected before any work began (bad range, empty filter, bad year)."""


class UpstreamUnavailableError(SyncError):
    """The legacy source could not be reached or answered garbage. Aborts the whole run."""
