from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd


def ensure_dir(p: str | Path) -> Path:
    path = Path(p)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_json(obj: Any, path: str | Path) -> None:
    path = Path(path)
    ensure_dir(path.parent)
    path.write_text(json.dumps(obj, indent=2, sort_keys=True))


def write_bed(bins: pd.DataFrame, path: str | Path) -> Path:
    """Write bin coordinates as BED (chrom, start, end, bin number)."""
    path = Path(path)
    ensure_dir(path.parent)
    out = bins[["chrom", "start", "end"]].copy()
    out["name"] = bins.index.to_numpy()
    out.to_csv(path, sep="\t", header=False, index=False)
    return path


def write_tsv(table: pd.DataFrame | pd.Series, path: str | Path) -> Path:
    path = Path(path)
    ensure_dir(path.parent)
    table.to_csv(path, sep="\t", header=True, index=True, float_format="%.8g")
    return path
