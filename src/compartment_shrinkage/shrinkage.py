"""Empirical-Bayes shrinkage of bin-level estimates toward a reference mean.

Each bin's per-sample summary ``x_i`` is pulled toward the bin prior ``m``:

    shrunk_i = m + C * (x_i - m)

with ``C`` the sample standard deviation of that bin's values (over the target
samples when given). Bins with a lot of cross-sample spread keep more of their
own signal; quiet bins collapse toward the prior.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

import numpy as np
import pandas as pd

from .assays import DEFAULT_ASSAY, Assay, to_model_scale
from .binning import DEFAULT_RESOLUTION, assign_bins
from .errors import InputTypeError, InsufficientTargets
from .genomes import DEFAULT_GENOME
from .global_means import global_means, normalize_targets
from .samples import SampleSet
from .summarize import summarize_bins

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShrunkenBins:
    """Row-aligned outputs for one chromosome.

    ``bins``, ``x`` and ``prior`` share the same index (bin number on the chromosome).
    """

    bins: pd.DataFrame
    x: pd.DataFrame
    prior: pd.Series
    chrom: str
    assay: Assay
    resolution: int
    genome: str
    targets: tuple[str, ...] | None = None

    @property
    def n_bins(self) -> int:
        return int(self.x.shape[0])

    @property
    def samples(self) -> list[str]:
        return [str(c) for c in self.x.columns]


def _spread_columns(n_samples: int, target_columns: Sequence[int] | None) -> np.ndarray:
    if target_columns is None:
        if n_samples < 2:
            raise InputTypeError("Untargeted shrinkage needs at least two samples to estimate bin spread")
        return np.arange(n_samples)
    idx = np.asarray(list(target_columns), dtype=np.int64)
    if idx.size == 1:
        raise InsufficientTargets("Cannot perform targeted bin-level shrinkage with one target sample")
    if idx.size == 0:
        return _spread_columns(n_samples, None)
    if idx.min() < 0 or idx.max() >= n_samples:
        raise InputTypeError(f"target column out of range for {n_samples} samples")
    return idx


def shrink_values(
    x: np.ndarray,
    prior: np.ndarray,
    target_columns: Sequence[int] | None = None,
) -> np.ndarray:
    """Shrink every column of ``x`` (bins x samples) toward ``prior`` (bins,).

    The coefficient is recomputed per bin from that bin's spread; with targets the
    spread comes from the target columns only, but all columns are shrunk.
    """
    X = np.asarray(x, dtype=np.float64)
    if X.ndim != 2:
        raise InputTypeError("x must be 2D (bins x samples)")
    m = np.asarray(prior, dtype=np.float64).ravel()
    if m.shape[0] != X.shape[0]:
        raise InputTypeError("prior length must match the number of bins")

    cols = _spread_columns(X.shape[1], target_columns)
    C = X[:, cols].std(axis=1, ddof=1)[:, None]
    m = m[:, None]
    # Same as m + C * (x - m), but C == 1 returns x and C == 0 returns m bit-for-bit.
    return X * C + m * (1.0 - C)


def drop_zero_prior_bins(
    bins: pd.DataFrame,
    x: pd.DataFrame,
    prior: pd.Series,
) -> tuple[pd.DataFrame, pd.DataFrame, pd.Series]:
    """Remove bins whose prior is exactly zero from all three tables at once.

    A zero prior shows up in sparse (e.g. single-cell derived) inputs and breaks the
    downstream correlation step.
    """
    if not (len(bins) == len(x) == len(prior)):
        raise InputTypeError("bins, x and prior must have the same number of rows")
    keep = (prior.to_numpy() != 0)
    n_drop = int((~keep).sum())
    if n_drop:
        logger.warning("Dropping %d bin(s) with a zero prior mean", n_drop)
    return bins.loc[keep], x.loc[keep], prior.loc[keep]


def _prior_vector(prior_means, index: pd.Index) -> np.ndarray:
    if isinstance(prior_means, pd.DataFrame):
        if prior_means.shape[1] != 1:
            raise InputTypeError("prior_means must have a single column")
        prior_means = prior_means.iloc[:, 0]
    if isinstance(prior_means, pd.Series):
        missing = index.difference(prior_means.index)
        if len(missing):
            raise InputTypeError(f"prior_means is missing {len(missing)} feature(s), e.g. {missing[0]!r}")
        p = prior_means.loc[index].to_numpy(dtype=np.float64)
    else:
        p = np.asarray(prior_means, dtype=np.float64).ravel()
        if p.shape[0] != len(index):
            raise InputTypeError(f"prior_means has {p.shape[0]} values for {len(index)} features")
    if not np.isfinite(p).all():
        raise InputTypeError("prior_means contains NA or infinite values")
    return p


def _check_model_values(values: np.ndarray, assay: Assay, what: str) -> np.ndarray:
    if not np.isfinite(values).all():
        raise InputTypeError(f"{what} are not finite on the model scale (beta values outside [0, 1]?)")
    if assay is Assay.ATAC and (values < 0).any():
        raise InputTypeError(f"{what} must be non-negative for ATAC counts")
    return values


def shrink_bins(
    samples: SampleSet,
    *,
    chrom: str,
    reference: SampleSet | None = None,
    prior_means: pd.Series | np.ndarray | None = None,
    resolution: int = DEFAULT_RESOLUTION,
    targets: str | Iterable[str] | None = None,
    assay: Assay | str = DEFAULT_ASSAY,
    genome: str | Mapping[str, int] = DEFAULT_GENOME,
    logit_transform: bool = True,
) -> ShrunkenBins:
    """Bin one chromosome and shrink each sample's bin values toward the prior.

    Args:
        samples: samples to shrink; output columns follow its column order
        chrom: chromosome to operate on
        reference: cohort used for the prior (defaults to ``samples``)
        prior_means: per-feature prior on the model scale; skips the reference mean
        resolution: bin width in bases
        targets: sample names to shrink toward (prior and spread use only these);
            taken from ``samples`` when all are there, else from ``reference``
        assay: "array", "atac" or "bisulfite"
        genome: build name ("hg19", "hg38", "mm9", "mm10") or a chrom -> length mapping
        logit_transform: convert array beta values to M-values first

    Returns:
        ShrunkenBins with zero-prior bins removed
    """
    if not isinstance(samples, SampleSet):
        raise InputTypeError(f"samples must be a SampleSet; got {type(samples).__name__}")
    if reference is not None and not isinstance(reference, SampleSet):
        raise InputTypeError(f"reference must be a SampleSet; got {type(reference).__name__}")
    assay = Assay.coerce(assay)
    names = normalize_targets(targets)
    index = samples.values.index
    n_samples = len(samples.samples)
    ref = samples if reference is None else reference.align_to(index)

    # Targets come from the samples when all are there, otherwise from the reference;
    # reference-only targets are binned next to the samples and only feed the spread.
    target_columns = None
    spread_extra = None
    if names is not None:
        if all(t in samples.samples for t in names):
            target_columns = [samples.samples.index(t) for t in names]
        elif all(t in ref.samples for t in names):
            spread_extra = ref.select(names)
            target_columns = list(range(n_samples, n_samples + len(names)))
        else:
            missing = [t for t in names if t not in ref.samples]
            raise InputTypeError(f"Target(s) not among the samples or the reference: {missing}")
    _spread_columns(n_samples + (0 if spread_extra is None else len(names)), target_columns)

    X = _check_model_values(
        to_model_scale(samples.matrix(), assay, logit_transform=logit_transform), assay, "Sample values"
    )
    if spread_extra is not None:
        T = _check_model_values(
            to_model_scale(spread_extra.matrix(), assay, logit_transform=logit_transform),
            assay,
            "Reference target values",
        )
        X = np.column_stack([X, T])

    if prior_means is not None:
        p = _prior_vector(prior_means, index)
    else:
        if reference is not None:
            _check_model_values(
                to_model_scale(ref.matrix(), assay, logit_transform=logit_transform), assay, "Reference values"
            )
        p = global_means(ref, names, assay=assay, logit_transform=logit_transform).to_numpy()
    p = _check_model_values(p, assay, "Prior means")

    fb = assign_bins(samples.coords, genome, chrom, resolution)
    summary, prior_bins = summarize_bins(X[fb.mask], fb.codes, fb.n_bins, assay, prior=p[fb.mask])
    shrunk = shrink_values(summary, prior_bins, target_columns)[:, :n_samples]

    bins_df = fb.to_dataframe()
    x = pd.DataFrame(shrunk, index=bins_df.index, columns=samples.values.columns)
    prior = pd.Series(prior_bins, index=bins_df.index, name="globalMean")
    bins_df, x, prior = drop_zero_prior_bins(bins_df, x, prior)

    logger.info(
        "%s @ %d bp (%s): %d bins x %d samples after shrinkage",
        fb.bins.chrom,
        fb.bins.binsize,
        assay.value,
        x.shape[0],
        x.shape[1],
    )

    return ShrunkenBins(
        bins=bins_df,
        x=x,
        prior=prior,
        chrom=fb.bins.chrom,
        assay=assay,
        resolution=fb.bins.binsize,
        genome=genome if isinstance(genome, str) else "custom",
        targets=None if names is None else tuple(names),
    )
