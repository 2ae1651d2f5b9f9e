"""
Error taxonomy.

Only StorageUnavailable and ValidationError are surfaced to callers; the rest are
raised internally, logged, and degrade to a reduced result.
"""


class SpeError(Exception):
    """Base class for all service errors."""


class StorageUnavailable(SpeError):
    """No persistence backing is configured or it cannot be opened."""


class ValidationError(SpeError):
    """Malformed or empty vector, or mismatched dimensionality."""


class RecurrenceParseError(SpeError):
    """The recurrence-rule evaluator rejected a rule string."""


class IndexWriteFailure(SpeError):
    """Similarity index creation or insertion failed."""


class OptimizerUnavailable(SpeError):
    """External route optimizer is not configured or did not produce a result."""
