from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .assays import DEFAULT_ASSAY
from .binning import DEFAULT_RESOLUTION
from .errors import InputTypeError
from .genomes import DEFAULT_GENOME, load_chrom_sizes
from .reporting import ensure_dir, write_bed, write_json, write_tsv
from .samples import SampleSet, read_sample_set, read_values_tsv
from .shrinkage import shrink_bins

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineOutputs:
    out_dir: Path
    shrunken_path: Path
    bins_path: Path
    prior_path: Path
    meta_path: Path


def run_pipeline(
    *,
    values: str | Path,
    coords: str | Path,
    out_dir: str | Path,
    chrom: str,
    reference: str | Path | None = None,
    resolution: int = DEFAULT_RESOLUTION,
    targets: Sequence[str] | None = None,
    assay: str = DEFAULT_ASSAY.value,
    genome: str = DEFAULT_GENOME,
    chrom_sizes: str | Path | None = None,
    logit_transform: bool = True,
) -> PipelineOutputs:
    """Read a sample matrix + coordinates, shrink one chromosome, write the results.

    ``reference`` is a values TSV over the same features (extra columns allowed).
    ``chrom_sizes`` overrides the built-in genome table with a UCSC sizes file.
    """
    out_dir = ensure_dir(out_dir)

    samples = read_sample_set(values, coords)
    ref = None
    if reference is not None:
        ref_values = read_values_tsv(reference)
        missing = samples.values.index.difference(ref_values.index)
        if len(missing):
            raise InputTypeError(f"{len(missing)} feature(s) missing from {reference}, e.g. {missing[0]!r}")
        ref = SampleSet(values=ref_values.loc[samples.values.index], coords=samples.coords)
    sizes = load_chrom_sizes(chrom_sizes) if chrom_sizes is not None else genome

    logger.info("Loaded %d features x %d samples from %s", samples.n_features, len(samples.samples), values)

    res = shrink_bins(
        samples,
        chrom=chrom,
        reference=ref,
        resolution=resolution,
        targets=targets,
        assay=assay,
        genome=sizes,
        logit_transform=logit_transform,
    )

    shrunken_path = write_tsv(res.x, out_dir / "shrunken.tsv")
    bins_path = write_bed(res.bins, out_dir / "bins.bed")
    prior_path = write_tsv(res.prior.to_frame(), out_dir / "prior.tsv")

    meta = {
        "values": str(values),
        "coords": str(coords),
        "reference": None if reference is None else str(reference),
        "chrom": res.chrom,
        "genome": str(chrom_sizes) if chrom_sizes is not None else genome,
        "resolution": int(res.resolution),
        "assay": res.assay.value,
        "summary": res.assay.summary.value,
        "targets": None if res.targets is None else list(res.targets),
        "logit_transform": bool(logit_transform),
        "n_bins": res.n_bins,
        "samples": res.samples,
    }
    meta_path = out_dir / "meta.json"
    write_json(meta, meta_path)

    return PipelineOutputs(
        out_dir=Path(out_dir),
        shrunken_path=shrunken_path,
        bins_path=bins_path,
        prior_path=prior_path,
        meta_path=meta_path,
    )
