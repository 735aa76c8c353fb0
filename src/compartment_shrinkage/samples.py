from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from .errors import InputTypeError

COORD_COLUMNS = ["chrom", "start", "end"]


@dataclass(frozen=True)
class SampleSet:
    """Dense feature x sample matrix with per-feature genomic coordinates.

    ``values`` and ``coords`` share one index (feature ids). Missing values must be
    imputed before they get here.
    """

    values: pd.DataFrame
    coords: pd.DataFrame

    def __post_init__(self) -> None:
        v, c = self.values, self.coords
        if not isinstance(v, pd.DataFrame) or not isinstance(c, pd.DataFrame):
            raise InputTypeError("SampleSet needs pandas DataFrames for values and coords")
        if v.shape[1] == 0:
            raise InputTypeError("SampleSet has no sample columns")
        if v.shape[0] == 0:
            raise InputTypeError("SampleSet has no features")
        if v.columns.duplicated().any():
            raise InputTypeError(f"Duplicate sample names: {list(v.columns[v.columns.duplicated()])}")
        if v.index.duplicated().any():
            raise InputTypeError("Duplicate feature ids in values")
        missing = set(COORD_COLUMNS) - set(c.columns)
        if missing:
            raise InputTypeError(f"Feature coordinates are missing columns: {sorted(missing)}")
        if not v.index.equals(c.index):
            raise InputTypeError("values and coords must share the same feature index (same order)")
        if not all(pd.api.types.is_numeric_dtype(t) for t in v.dtypes):
            raise InputTypeError("Sample values must be numeric")
        if v.isna().to_numpy().any():
            raise InputTypeError("Sample values contain NA; impute before binning")
        starts = c["start"].to_numpy()
        ends = c["end"].to_numpy()
        if not (pd.api.types.is_integer_dtype(c["start"]) and pd.api.types.is_integer_dtype(c["end"])):
            raise InputTypeError("Feature start/end must be integers")
        if (starts < 0).any() or (ends <= starts).any():
            bad = c.index[(starts < 0) | (ends <= starts)][0]
            raise InputTypeError(f"Invalid interval for feature {bad!r} (need 0 <= start < end)")

    @property
    def samples(self) -> list[str]:
        return [str(s) for s in self.values.columns]

    @property
    def n_features(self) -> int:
        return int(self.values.shape[0])

    def matrix(self) -> np.ndarray:
        return self.values.to_numpy(dtype=np.float64)

    def select(self, columns) -> "SampleSet":
        cols = list(columns)
        unknown = [s for s in cols if s not in self.values.columns]
        if unknown:
            raise InputTypeError(f"Unknown sample name(s): {unknown}")
        return SampleSet(values=self.values.loc[:, cols], coords=self.coords)

    def align_to(self, index: pd.Index) -> "SampleSet":
        """Reorder/subset features to ``index``; every feature must be present."""
        missing = index.difference(self.values.index)
        if len(missing):
            raise InputTypeError(f"{len(missing)} feature(s) missing from reference set, e.g. {missing[0]!r}")
        return SampleSet(values=self.values.loc[index], coords=self.coords.loc[index])


def read_coords_bed(path: str | Path) -> pd.DataFrame:
    """Read feature coordinates from BED (chrom, start, end, name; no header)."""
    try:
        df = pd.read_csv(path, sep="\t", header=None, comment="#", dtype={0: str})
    except pd.errors.EmptyDataError:
        raise InputTypeError(f"Coordinate file is empty: {path}") from None
    if df.empty:
        raise InputTypeError(f"Coordinate file is empty: {path}")
    if df.shape[1] < 4:
        raise InputTypeError(
            f"Coordinate file {path} has {df.shape[1]} column(s); need BED4+ (chrom, start, end, name)"
        )
    df = df.iloc[:, :4].copy()
    df.columns = ["chrom", "start", "end", "name"]
    if not (pd.api.types.is_integer_dtype(df["start"]) and pd.api.types.is_integer_dtype(df["end"])):
        raise InputTypeError(f"Non-integer start/end in {path}")
    df["start"] = df["start"].astype(np.int64)
    df["end"] = df["end"].astype(np.int64)
    df["name"] = df["name"].astype(str)
    return df.set_index("name")


def read_values_tsv(path: str | Path) -> pd.DataFrame:
    """Read a feature x sample matrix (header row; first column is the feature id)."""
    df = pd.read_csv(path, sep="\t", index_col=0)
    df.index = df.index.astype(str)
    df.columns = [str(c) for c in df.columns]
    if df.empty:
        raise InputTypeError(f"Value matrix is empty: {path}")
    return df


def read_sample_set(values: str | Path, coords: str | Path) -> SampleSet:
    """Load a SampleSet, reordering values to the coordinate file's feature order."""
    c = read_coords_bed(coords)
    c.index = c.index.astype(str)
    v = read_values_tsv(values)
    if not v.index.isin(c.index).all():
        extra = v.index[~v.index.isin(c.index)][0]
        raise InputTypeError(f"Feature {extra!r} in {values} has no coordinates in {coords}")
    c = c.loc[c.index.isin(v.index)]
    return SampleSet(values=v.loc[c.index], coords=c)
