from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .assays import DEFAULT_ASSAY, Assay
from .binning import DEFAULT_RESOLUTION
from .genomes import DEFAULT_GENOME, GENOMES
from .pipeline import run_pipeline
from .synth import synth_dataset


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="compartment-shrinkage")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = p.add_subparsers(dest="cmd", required=True)

    assays = [a.value for a in Assay]

    ps = sub.add_parser("synth", help="Generate a small synthetic cohort (values TSV + coordinates BED)")
    ps.add_argument("--out_dir", type=str, default="data/synthetic")
    ps.add_argument("--n_features", type=int, default=2000)
    ps.add_argument("--n_samples", type=int, default=6)
    ps.add_argument("--n_bins", type=int, default=40)
    ps.add_argument("--binsize", type=int, default=100_000)
    ps.add_argument("--chrom", type=str, default="chr1")
    ps.add_argument("--assay", type=str, default=DEFAULT_ASSAY.value, choices=assays)
    ps.add_argument("--seed", type=int, default=0)

    pr = sub.add_parser("run", help="Bin one chromosome and shrink sample estimates toward the reference mean")
    pr.add_argument("--values", type=str, required=True, help="Feature x sample TSV (imputed, no NA)")
    pr.add_argument("--coords", type=str, required=True, help="Feature coordinates BED (chrom,start,end,name)")
    pr.add_argument("--out_dir", type=str, required=True)
    pr.add_argument("--chrom", type=str, required=True)
    pr.add_argument("--reference", type=str, default=None, help="Reference cohort TSV for the prior mean")
    pr.add_argument("--resolution", type=int, default=DEFAULT_RESOLUTION)
    pr.add_argument("--targets", type=str, nargs="+", default=None, help="Sample names to shrink toward")
    pr.add_argument("--assay", type=str, default=DEFAULT_ASSAY.value, choices=assays)
    pr.add_argument("--genome", type=str, default=DEFAULT_GENOME, choices=sorted(GENOMES))
    pr.add_argument("--chrom_sizes", type=str, default=None, help="UCSC .chrom.sizes file (overrides --genome)")
    pr.add_argument(
        "--logit",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Convert array beta values to M-values before binning",
    )

    return p


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "synth":
        paths = synth_dataset(
            out_dir=args.out_dir,
            n_features=int(args.n_features),
            n_samples=int(args.n_samples),
            n_bins=int(args.n_bins),
            binsize=int(args.binsize),
            chrom=str(args.chrom),
            assay=str(args.assay),
            seed=int(args.seed),
        )
        print("Wrote:")
        for k, v in paths.items():
            print(f"  {k}: {Path(v).as_posix()}")
        return

    if args.cmd == "run":
        out = run_pipeline(
            values=args.values,
            coords=args.coords,
            out_dir=args.out_dir,
            chrom=str(args.chrom),
            reference=args.reference,
            resolution=int(args.resolution),
            targets=args.targets,
            assay=str(args.assay),
            genome=str(args.genome),
            chrom_sizes=args.chrom_sizes,
            logit_transform=bool(args.logit),
        )
        print("Wrote outputs to:", out.out_dir.as_posix())
        return

    raise SystemExit(f"Unknown command: {args.cmd}")


if __name__ == "__main__":
    main()
