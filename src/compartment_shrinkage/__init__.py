"""Empirical-Bayes shrinkage of binned epigenomic signal for A/B compartment inference.

Core idea: features are binned per chromosome, summarized per assay, and each sample's
bin value is shrunk toward a reference-cohort prior with a per-bin spread coefficient.
"""

from .assays import Assay, SummaryFunction, fexpit, flogit
from .binning import FeatureBins, GenomicBins, assign_bins, tile_chromosome
from .errors import (
    InputTypeError,
    InsufficientTargets,
    InternalConsistencyError,
    InvalidChromosome,
    InvalidResolution,
    ShrinkageError,
)
from .genomes import length_of, load_chrom_sizes
from .global_means import global_means
from .samples import SampleSet, read_sample_set
from .shrinkage import ShrunkenBins, drop_zero_prior_bins, shrink_bins, shrink_values
from .summarize import summarize_bins

__all__ = [
    "Assay",
    "SummaryFunction",
    "flogit",
    "fexpit",
    "GenomicBins",
    "FeatureBins",
    "tile_chromosome",
    "assign_bins",
    "ShrinkageError",
    "InputTypeError",
    "InvalidChromosome",
    "InvalidResolution",
    "InsufficientTargets",
    "InternalConsistencyError",
    "length_of",
    "load_chrom_sizes",
    "global_means",
    "SampleSet",
    "read_sample_set",
    "ShrunkenBins",
    "shrink_bins",
    "shrink_values",
    "drop_zero_prior_bins",
    "summarize_bins",
]
