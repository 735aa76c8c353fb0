from __future__ import annotations

import numpy as np
import pandas as pd

from .assays import Assay, SummaryFunction
from .errors import InputTypeError, InternalConsistencyError


def _apply_summary(values: np.ndarray, codes: np.ndarray, counts: np.ndarray, fn: SummaryFunction) -> np.ndarray:
    grouped = pd.DataFrame(values).groupby(codes, sort=True)
    if fn is SummaryFunction.ATAC_SUMMARY:
        with np.errstate(invalid="ignore"):
            return np.sqrt(grouped.mean().to_numpy(dtype=np.float64)) * counts[:, None]
    if fn is SummaryFunction.ARRAY_SUMMARY:
        return grouped.median().to_numpy(dtype=np.float64)
    if fn is SummaryFunction.BISULFITE_SUMMARY:
        return grouped.mean().to_numpy(dtype=np.float64)
    raise InternalConsistencyError(f"No summary implemented for {fn!r}")


def summarize_bins(
    values: np.ndarray,
    codes: np.ndarray,
    n_bins: int,
    assay: Assay | str,
    *,
    prior: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray | None]:
    """Collapse feature values to one number per bin and column.

    Args:
        values: (n_features, n_samples) on the model scale
        codes: (n_features,) retained-bin row for each feature, in [0, n_bins)
        n_bins: number of retained bins
        assay: selects the summary function (see ``Assay.summary``)
        prior: optional (n_features,) per-feature prior, summarized in the same pass

    Returns:
        (summary, prior_summary): shapes (n_bins, n_samples) and (n_bins,) or None
    """
    assay = Assay.coerce(assay)
    X = np.asarray(values, dtype=np.float64)
    if X.ndim == 1:
        X = X[:, None]
    if X.ndim != 2:
        raise InputTypeError("values must be 1D or 2D (features x samples)")

    codes = np.asarray(codes, dtype=np.int64).ravel()
    if codes.shape[0] != X.shape[0]:
        raise InputTypeError("codes length must match the number of feature rows")
    if codes.size and (codes.min() < 0 or codes.max() >= n_bins):
        raise InputTypeError(f"bin codes must lie in [0, {n_bins})")

    n_samples = X.shape[1]
    if prior is not None:
        p = np.asarray(prior, dtype=np.float64).ravel()
        if p.shape[0] != X.shape[0]:
            raise InputTypeError("prior length must match the number of feature rows")
        X = np.column_stack([X, p])
    # groupby skips NaN, which would silently shrink a bin's feature set.
    if not np.isfinite(X).all():
        raise InputTypeError("values and prior must be finite before summarizing")

    counts = np.bincount(codes, minlength=int(n_bins))
    if (counts == 0).any():
        empty = int(np.flatnonzero(counts == 0)[0])
        raise InternalConsistencyError(f"Retained bin row {empty} has no features")

    out = _apply_summary(X, codes, counts, assay.summary)
    if out.shape != (int(n_bins), X.shape[1]) or not np.isfinite(out).all():
        raise InternalConsistencyError(
            f"Bin summary ({assay.summary.value}) is undefined for at least one retained bin"
        )

    if prior is None:
        return out, None
    return out[:, :n_samples], out[:, n_samples]
