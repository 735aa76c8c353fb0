from __future__ import annotations


class ShrinkageError(ValueError):
    """Base class for errors raised by the binning/shrinkage pipeline."""


class InputTypeError(ShrinkageError):
    """Input matrix or coordinates fail a structural check."""


class InvalidChromosome(ShrinkageError):
    """Chromosome (or genome build) is not known to the length table."""


class InvalidResolution(ShrinkageError):
    """Bin width is not a positive integer."""


class InsufficientTargets(ShrinkageError):
    """Targeted shrinkage needs at least two target samples."""


class InternalConsistencyError(ShrinkageError, RuntimeError):
    """A retained bin produced no summarizable values.

    Binning only emits non-empty bins, so this indicates a bug rather than bad input.
    """
