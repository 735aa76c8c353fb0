from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from .assays import Assay
from .binning import GenomicBins
from .reporting import ensure_dir, write_json
from .samples import SampleSet


def make_compartment_track(bins: GenomicBins, *, seed: int = 0, block: int = 8) -> np.ndarray:
    """Per-bin A/B label (+1 / -1) with blocks of roughly ``block`` bins."""
    rng = np.random.default_rng(int(seed))
    labels = np.empty(bins.n_bins, dtype=np.float64)
    state = 1.0
    i = 0
    while i < bins.n_bins:
        run = max(1, int(rng.poisson(block)))
        labels[i : i + run] = state
        state = -state
        i += run
    return labels


def make_synthetic_samples(
    *,
    n_features: int = 2000,
    n_samples: int = 6,
    n_bins: int = 40,
    binsize: int = 100_000,
    chrom: str = "chr1",
    assay: Assay | str = Assay.ARRAY,
    seed: int = 0,
) -> tuple[SampleSet, dict[str, int]]:
    """Create a dense feature x sample cohort with compartment-like structure.

    Returns the SampleSet and a matching chrom -> length mapping.
    """
    assay = Assay.coerce(assay)
    rng = np.random.default_rng(int(seed))
    bins = GenomicBins(chrom=chrom, start=0, binsize=int(binsize), n_bins=int(n_bins))
    track = make_compartment_track(bins, seed=seed)

    starts = np.sort(rng.integers(0, bins.end - 1, size=int(n_features)))
    ends = starts + 1
    comp = track[starts // bins.binsize]

    # Sample-level effect sizes differ so bins carry real cross-sample spread.
    effect = rng.uniform(0.5, 1.5, size=int(n_samples))
    signal = comp[:, None] * effect[None, :]

    if assay is Assay.ARRAY:
        # Closed (B) compartments are more methylated: beta high where comp < 0.
        m = -1.5 * signal + 0.5 * rng.standard_normal(signal.shape)
        values = 1.0 / (1.0 + np.exp(-m))
    elif assay is Assay.ATAC:
        lam = np.exp(1.5 + 0.7 * signal)
        values = rng.poisson(lam).astype(np.float64)
    elif assay is Assay.BISULFITE:
        values = -1.2 * signal + 0.4 * rng.standard_normal(signal.shape)
    else:
        raise ValueError(f"Unsupported assay: {assay!r}")

    ids = [f"f{i:06d}" for i in range(int(n_features))]
    cols = [f"S{j + 1}" for j in range(int(n_samples))]
    coords = pd.DataFrame({"chrom": chrom, "start": starts, "end": ends}, index=pd.Index(ids, name="name"))
    df = pd.DataFrame(values, index=coords.index, columns=cols)
    return SampleSet(values=df, coords=coords), {chrom: int(bins.end)}


def write_sample_set(samples: SampleSet, out_dir: str | Path) -> dict[str, Path]:
    """Write ``values.tsv`` and ``coords.bed`` in the layout :func:`read_sample_set` expects."""
    out_dir = ensure_dir(out_dir)
    values_path = out_dir / "values.tsv"
    coords_path = out_dir / "coords.bed"

    samples.values.to_csv(values_path, sep="\t", index_label="name", float_format="%.6f")
    bed = samples.coords[["chrom", "start", "end"]].copy()
    bed["name"] = samples.coords.index.to_numpy()
    bed.to_csv(coords_path, sep="\t", header=False, index=False)
    return {"values": values_path, "coords": coords_path}


def synth_dataset(
    out_dir: str | Path,
    *,
    n_features: int = 2000,
    n_samples: int = 6,
    n_bins: int = 40,
    binsize: int = 100_000,
    chrom: str = "chr1",
    assay: Assay | str = Assay.ARRAY,
    seed: int = 0,
) -> dict[str, Path]:
    out_dir = ensure_dir(out_dir)
    assay = Assay.coerce(assay)

    samples, sizes = make_synthetic_samples(
        n_features=n_features,
        n_samples=n_samples,
        n_bins=n_bins,
        binsize=binsize,
        chrom=chrom,
        assay=assay,
        seed=seed,
    )
    paths = write_sample_set(samples, out_dir)

    sizes_path = out_dir / "chrom.sizes"
    sizes_path.write_text("".join(f"{c}\t{n}\n" for c, n in sizes.items()))

    meta = {
        "chrom": chrom,
        "binsize": int(binsize),
        "n_bins": int(n_bins),
        "n_features": int(n_features),
        "n_samples": int(n_samples),
        "assay": assay.value,
        "seed": int(seed),
        "values_format": "TSV, header row, first column feature id",
        "coords_format": "BED (chrom,start,end,name)",
    }
    write_json(meta, out_dir / "meta.json")

    return {
        **paths,
        "chrom_sizes": sizes_path,
        "meta": out_dir / "meta.json",
    }
