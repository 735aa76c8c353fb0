import numpy as np
import pandas as pd
import pytest

from compartment_shrinkage.binning import GenomicBins, assign_bins, tile_chromosome
from compartment_shrinkage.errors import InputTypeError, InvalidChromosome, InvalidResolution
from compartment_shrinkage.genomes import length_of, load_chrom_sizes


def _coords(starts, chrom="chr1"):
    starts = np.asarray(starts, dtype=np.int64)
    chroms = [chrom] * len(starts) if isinstance(chrom, str) else list(chrom)
    return pd.DataFrame(
        {"chrom": chroms, "start": starts, "end": starts + 1},
        index=[f"f{i}" for i in range(len(starts))],
    )


def test_tile_chromosome_equal_width_bins():
    bins = tile_chromosome({"chr1": 2_500_000}, "chr1", 1_000_000)
    assert bins.n_bins == 3
    df = bins.to_dataframe()
    assert (df["end"] - df["start"] == 1_000_000).all()
    assert np.all(np.diff(df["start"].to_numpy()) == 1_000_000)
    assert bins.end >= 2_500_000


def test_tile_chromosome_uses_builtin_lengths():
    bins = tile_chromosome("hg19", "chr14", 1_000_000)
    assert length_of("hg19", "chr14") == 107349540
    assert bins.n_bins == 108


def test_assign_bins_example():
    fb = assign_bins(_coords([500, 600_000, 1_500_000]), "hg19", "chr1", 1_000_000)
    assert fb.bin_ids.tolist() == [0, 1]
    assert fb.codes.tolist() == [0, 0, 1]
    assert fb.mask.all()

    df = fb.to_dataframe()
    assert df["start"].tolist() == [0, 1_000_000]
    assert df["end"].tolist() == [1_000_000, 2_000_000]


def test_assign_bins_half_open_boundary():
    # A feature starting exactly on a boundary belongs to the next bin.
    fb = assign_bins(_coords([999_999, 1_000_000]), {"chr1": 3_000_000}, "chr1", 1_000_000)
    assert fb.bin_ids.tolist() == [0, 1]


def test_assign_bins_skips_empty_bins_and_other_chroms():
    coords = _coords([10, 5_500_000, 20], chrom=["chr1", "chr1", "chr2"])
    fb = assign_bins(coords, "hg19", "chr1", 1_000_000)
    assert fb.mask.tolist() == [True, True, False]
    assert fb.bin_ids.tolist() == [0, 5]
    assert fb.codes.tolist() == [0, 1]


def test_assign_bins_drops_features_past_chromosome_end():
    fb = assign_bins(_coords([100, 5_000]), {"chr1": 1_000}, "chr1", 1_000)
    assert fb.mask.tolist() == [True, False]
    assert fb.n_bins == 1


def test_invalid_chromosome_and_genome():
    with pytest.raises(InvalidChromosome):
        tile_chromosome("hg19", "chrZ", 1_000_000)
    with pytest.raises(InvalidChromosome):
        tile_chromosome("hg37", "chr1", 1_000_000)
    # mm10 has no chr20
    with pytest.raises(InvalidChromosome):
        assign_bins(_coords([1]), "mm10", "chr20", 1_000_000)


@pytest.mark.parametrize("res", [0, -1_000, 1.5, "1000"])
def test_invalid_resolution(res):
    with pytest.raises(InvalidResolution):
        tile_chromosome("hg19", "chr1", res)


def test_no_features_on_chromosome():
    with pytest.raises(InputTypeError):
        assign_bins(_coords([1, 2], chrom="chr2"), "hg19", "chr1", 1_000_000)


def test_genomic_bins_bin_index():
    bins = GenomicBins(chrom="chr1", start=0, binsize=10, n_bins=5)
    assert bins.bin_index(0) == 0
    assert bins.bin_index(9) == 0
    assert bins.bin_index(10) == 1
    assert bins.bin_index(np.array([0, 15, 49])).tolist() == [0, 1, 4]
    assert bins.end == 50


def test_load_chrom_sizes(tmp_path):
    p = tmp_path / "toy.chrom.sizes"
    p.write_text("chrA\t1500\nchrB\t900\n")
    sizes = load_chrom_sizes(p)
    assert dict(sizes) == {"chrA": 1500, "chrB": 900}
    assert tile_chromosome(sizes, "chrA", 1000).n_bins == 2
    with pytest.raises(InvalidChromosome):
        tile_chromosome(sizes, "chr1", 1000)
