class LayoutEngineError(Exception):
    """Base class for precondition failures raised by the layout engine."""


class MissingSelectionError(LayoutEngineError, ValueError):
    """Raised when a required selection (ratio, option, segmentation) is missing."""


class LayoutOptionNotFoundError(LayoutEngineError, LookupError):
    """Raised when the catalog has no option for the requested channel/ratio/name."""


class NoSyncSetsFoundError(LayoutEngineError):
    """
    Raised when synchronized-set generation is requested but the layers carry
    no sync-visibility relations.

    This is distinct from an empty combination list so callers can tell the
    user specifically that nothing is linked.
    """


class InvalidRatioError(ValueError):
    """Raised for aspect-ratio labels that are not of the form "W:H"."""
