from __future__ import annotations

from enum import Enum

import numpy as np
from scipy.special import expit, logit

from .errors import InputTypeError


class SummaryFunction(str, Enum):
    """How feature values inside one bin collapse to a single number."""

    ATAC_SUMMARY = "atac_summary"  # sqrt(mean) * count
    ARRAY_SUMMARY = "array_summary"  # median
    BISULFITE_SUMMARY = "bisulfite_summary"  # mean


class Assay(str, Enum):
    ARRAY = "array"
    ATAC = "atac"
    BISULFITE = "bisulfite"

    @classmethod
    def coerce(cls, value: "Assay | str") -> "Assay":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(a.value for a in cls)
            raise InputTypeError(f"Unknown assay {value!r}; expected one of: {choices}") from None

    @property
    def summary(self) -> SummaryFunction:
        return _SUMMARY_BY_ASSAY[self]


_SUMMARY_BY_ASSAY = {
    Assay.ARRAY: SummaryFunction.ARRAY_SUMMARY,
    Assay.ATAC: SummaryFunction.ATAC_SUMMARY,
    Assay.BISULFITE: SummaryFunction.BISULFITE_SUMMARY,
}

DEFAULT_ASSAY = Assay.ARRAY

SQUEEZE = 1e-6


def flogit(p: np.ndarray, sqz: float = SQUEEZE) -> np.ndarray:
    """Logit of beta values after squeezing them away from 0 and 1.

    Beta values of exactly 0 or 1 map to large finite M-values instead of +/-inf.
    """
    p = np.asarray(p, dtype=np.float64)
    deflate = 1.0 - sqz * 0.5
    return logit((p - 0.5) * deflate + 0.5)


def fexpit(m: np.ndarray, sqz: float = SQUEEZE) -> np.ndarray:
    """Inverse of :func:`flogit`."""
    m = np.asarray(m, dtype=np.float64)
    deflate = 1.0 - sqz * 0.5
    return (expit(m) - 0.5) / deflate + 0.5


def to_model_scale(values: np.ndarray, assay: Assay, *, logit_transform: bool = True) -> np.ndarray:
    """Bring raw assay values onto the scale used for binning and shrinkage.

    Array beta values go to the M-value scale; counts and bisulfite M-values pass through.
    """
    values = np.asarray(values, dtype=np.float64)
    if assay is Assay.ARRAY and logit_transform:
        return flogit(values)
    return values
