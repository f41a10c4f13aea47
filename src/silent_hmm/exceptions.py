"""
Exception hierarchy for silent-hmm.
"""


class SilentHMMError(Exception):
    """Base exception for silent-hmm."""
    pass


class ModelConstructionError(SilentHMMError):
    """Model failed validation while being built (cycles, begin state, probabilities)."""
    pass


class ModelUsageError(SilentHMMError):
    """Model queried in a way its states do not support."""
    pass


class InvalidSymbolError(SilentHMMError):
    """Symbol outside the model's alphabet."""

    def __init__(self, symbol, position=None):
        self.symbol = symbol
        self.position = position
        if position is None:
            message = f"Symbol {symbol!r} is not in the model alphabet"
        else:
            message = f"Symbol {symbol!r} at position {position} is not in the model alphabet"
        super().__init__(message)


class FillOrderError(SilentHMMError):
    """DP matrix cell overwritten or read before being written."""
    pass


class ModelFormatError(SilentHMMError):
    """Model file parsing and schema validation errors."""
    pass


class SequenceFormatError(SilentHMMError):
    """Sequence file reading errors."""
    pass


class PersistenceError(SilentHMMError):
    """Saving or loading persisted models failed."""
    pass
