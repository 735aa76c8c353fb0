from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

import numpy as np
import pandas as pd

from .errors import InputTypeError, InvalidResolution
from .genomes import length_of

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION = 1_000_000


@dataclass(frozen=True)
class GenomicBins:
    """Fixed-width bins tiling a single chromosome."""

    chrom: str
    start: int
    binsize: int
    n_bins: int

    @property
    def end(self) -> int:
        return self.start + self.binsize * self.n_bins

    def bin_index(self, pos: int | np.ndarray) -> int | np.ndarray:
        """Bin number covering ``pos`` (scalar or array of positions)."""
        idx = (np.asarray(pos, dtype=np.int64) - self.start) // self.binsize
        return int(idx) if idx.ndim == 0 else idx

    def to_dataframe(self, bins: np.ndarray | None = None) -> pd.DataFrame:
        """Coordinates of all bins, or of the selected bin numbers only."""
        idx = np.arange(self.n_bins, dtype=np.int64) if bins is None else np.asarray(bins, dtype=np.int64)
        starts = self.start + self.binsize * idx
        ends = starts + self.binsize
        return pd.DataFrame(
            {
                "chrom": self.chrom,
                "start": starts,
                "end": ends,
            },
            index=pd.Index(idx, name="bin"),
        )


@dataclass(frozen=True)
class FeatureBins:
    """Assignment of features to the non-empty bins of one chromosome.

    Attributes:
        bins: the full tiling of the chromosome
        mask: (n_features,) True for features that landed in a bin
        codes: (mask.sum(),) row of the retained bin for each used feature
        bin_ids: (n_retained,) ascending bin numbers that hold at least one feature
    """

    bins: GenomicBins
    mask: np.ndarray
    codes: np.ndarray
    bin_ids: np.ndarray

    @property
    def n_bins(self) -> int:
        return int(self.bin_ids.shape[0])

    def to_dataframe(self) -> pd.DataFrame:
        return self.bins.to_dataframe(self.bin_ids)


def _check_resolution(resolution) -> int:
    if isinstance(resolution, (bool, np.bool_)):
        raise InvalidResolution(f"Resolution must be a positive integer; got {resolution!r}")
    try:
        res = int(resolution)
    except (TypeError, ValueError):
        raise InvalidResolution(f"Resolution must be a positive integer; got {resolution!r}") from None
    if res != resolution or res <= 0:
        raise InvalidResolution(f"Resolution must be a positive integer; got {resolution!r}")
    return res


def tile_chromosome(
    genome: str | Mapping[str, int],
    chrom: str,
    resolution: int = DEFAULT_RESOLUTION,
) -> GenomicBins:
    """Tile ``[0, len(chrom))`` with bins of exactly ``resolution`` bases.

    The last bin may run past the chromosome end so that every bin has the same width.
    """
    res = _check_resolution(resolution)
    length = length_of(genome, str(chrom))
    n_bins = -(-length // res)
    return GenomicBins(chrom=str(chrom), start=0, binsize=res, n_bins=int(n_bins))


def assign_bins(
    coords: pd.DataFrame,
    genome: str | Mapping[str, int],
    chrom: str,
    resolution: int = DEFAULT_RESOLUTION,
) -> FeatureBins:
    """Assign each feature on ``chrom`` to the bin covering its start coordinate.

    Only bins holding at least one feature are kept; they are returned in ascending order.
    """
    bins = tile_chromosome(genome, chrom, resolution)

    missing = {"chrom", "start"} - set(coords.columns)
    if missing:
        raise InputTypeError(f"Feature coordinates are missing columns: {sorted(missing)}")

    on_chrom = (coords["chrom"].astype(str) == bins.chrom).to_numpy()
    if not on_chrom.any():
        raise InputTypeError(f"No features on {bins.chrom}")

    starts = coords["start"].to_numpy(dtype=np.int64)
    inside = (starts >= bins.start) & (starts < bins.end)
    outside = on_chrom & ~inside
    if outside.any():
        logger.warning(
            "Dropping %d feature(s) on %s starting outside [%d, %d)",
            int(outside.sum()),
            bins.chrom,
            bins.start,
            bins.end,
        )

    mask = on_chrom & inside
    if not mask.any():
        raise InputTypeError(f"No features on {bins.chrom} fall inside the chromosome")

    raw = bins.bin_index(starts[mask])
    bin_ids, codes = np.unique(raw, return_inverse=True)
    logger.debug("%s: %d features in %d/%d bins", bins.chrom, int(mask.sum()), len(bin_ids), bins.n_bins)

    return FeatureBins(
        bins=bins,
        mask=mask,
        codes=codes.astype(np.int64).ravel(),
        bin_ids=bin_ids.astype(np.int64),
    )
