import numpy as np
import pytest

from compartment_shrinkage.assays import Assay, SummaryFunction, fexpit, flogit, to_model_scale
from compartment_shrinkage.errors import InputTypeError, InternalConsistencyError
from compartment_shrinkage.summarize import summarize_bins


def test_assay_summary_mapping():
    assert Assay.ATAC.summary is SummaryFunction.ATAC_SUMMARY
    assert Assay.ARRAY.summary is SummaryFunction.ARRAY_SUMMARY
    assert Assay.BISULFITE.summary is SummaryFunction.BISULFITE_SUMMARY
    assert Assay.coerce("ATAC") is Assay.ATAC
    with pytest.raises(InputTypeError):
        Assay.coerce("rnaseq")


def test_array_summary_is_median():
    values = np.array([[0.1, 1.0], [0.2, 3.0], [0.7, 2.0], [0.3, 5.0]])
    codes = np.array([0, 0, 0, 1])
    out, prior = summarize_bins(values, codes, 2, Assay.ARRAY)
    assert prior is None
    assert np.allclose(out, [[0.2, 2.0], [0.3, 5.0]])


def test_atac_summary_scales_by_count():
    values = np.array([[4.0], [16.0], [9.0]])
    out, _ = summarize_bins(values, np.array([0, 0, 1]), 2, "atac")
    assert np.allclose(out[:, 0], [np.sqrt(10.0) * 2, 3.0])


def test_bisulfite_summary_is_mean():
    values = np.array([[1.0], [2.0], [6.0], [-1.0]])
    out, _ = summarize_bins(values, np.array([0, 0, 0, 1]), 2, Assay.BISULFITE)
    assert np.allclose(out[:, 0], [3.0, -1.0])


@pytest.mark.parametrize("assay", list(Assay))
def test_prior_summarized_like_a_sample(assay):
    rng = np.random.default_rng(1)
    values = rng.uniform(0.5, 4.0, size=(12, 3))
    prior = rng.uniform(0.5, 4.0, size=12)
    codes = np.repeat(np.arange(4), 3)

    out, p = summarize_bins(values, codes, 4, assay, prior=prior)
    as_column, _ = summarize_bins(prior[:, None], codes, 4, assay)
    assert out.shape == (4, 3)
    assert np.allclose(p, as_column[:, 0])


def test_empty_bin_is_internal_error():
    with pytest.raises(InternalConsistencyError):
        summarize_bins(np.ones((2, 1)), np.array([0, 2]), 3, Assay.ARRAY)


def test_undefined_atac_summary_is_internal_error():
    with pytest.raises(InternalConsistencyError):
        summarize_bins(np.array([[-4.0], [1.0]]), np.array([0, 0]), 1, Assay.ATAC)


def test_codes_out_of_range():
    with pytest.raises(InputTypeError):
        summarize_bins(np.ones((2, 1)), np.array([0, 5]), 2, Assay.ARRAY)


def test_flogit_is_finite_at_bounds_and_invertible():
    p = np.array([0.0, 0.25, 0.5, 0.9, 1.0])
    m = flogit(p)
    assert np.isfinite(m).all()
    assert m[2] == 0.0
    assert np.all(np.diff(m) > 0)
    assert np.allclose(fexpit(m), p)


def test_to_model_scale_only_touches_array_betas():
    v = np.array([[0.2, 0.8]])
    assert np.allclose(to_model_scale(v, Assay.ARRAY), flogit(v))
    assert np.array_equal(to_model_scale(v, Assay.ARRAY, logit_transform=False), v)
    assert np.array_equal(to_model_scale(v, Assay.ATAC), v)
    assert np.array_equal(to_model_scale(v, Assay.BISULFITE), v)


@pytest.mark.parametrize("assay", list(Assay))
def test_non_finite_values_rejected(assay):
    with pytest.raises(InputTypeError):
        summarize_bins(np.array([[1.0], [np.nan]]), np.array([0, 0]), 1, assay)
    with pytest.raises(InputTypeError):
        summarize_bins(np.array([[1.0], [2.0]]), np.array([0, 0]), 1, assay, prior=np.array([1.0, np.inf]))
