import numpy as np
import pandas as pd
import pytest

from compartment_shrinkage.assays import Assay, flogit
from compartment_shrinkage.errors import InputTypeError, InsufficientTargets
from compartment_shrinkage.global_means import global_means, normalize_targets


def test_global_means_all_columns(sample_set_factory):
    ref = sample_set_factory([[1.0, 3.0, 5.0], [2.0, 2.0, 8.0]], [10, 20])
    gm = global_means(ref, assay=Assay.BISULFITE)
    assert gm.index.tolist() == ["f0", "f1"]
    assert np.allclose(gm.to_numpy(), [3.0, 4.0])


def test_global_means_restricted_to_targets(sample_set_factory):
    ref = sample_set_factory([[1.0, 3.0, 5.0], [2.0, 2.0, 8.0]], [10, 20])
    gm = global_means(ref, targets=["S1", "S3"], assay="atac")
    assert np.allclose(gm.to_numpy(), [3.0, 5.0])


def test_global_means_array_on_m_value_scale(sample_set_factory):
    betas = np.array([[0.2, 0.6], [0.9, 0.5]])
    ref = sample_set_factory(betas, [10, 20])
    gm = global_means(ref, assay=Assay.ARRAY)
    assert np.allclose(gm.to_numpy(), flogit(betas).mean(axis=1))

    raw = global_means(ref, assay=Assay.ARRAY, logit_transform=False)
    assert np.allclose(raw.to_numpy(), betas.mean(axis=1))


@pytest.mark.parametrize("assay", list(Assay))
def test_single_target_is_rejected(sample_set_factory, assay):
    ref = sample_set_factory([[1.0, 3.0], [2.0, 2.0]], [10, 20])
    with pytest.raises(InsufficientTargets):
        global_means(ref, targets=["S1"], assay=assay)
    with pytest.raises(InsufficientTargets):
        global_means(ref, targets="S1", assay=assay)


def test_unknown_target(sample_set_factory):
    ref = sample_set_factory([[1.0, 3.0], [2.0, 2.0]], [10, 20])
    with pytest.raises(InputTypeError):
        global_means(ref, targets=["S1", "nope"], assay=Assay.ATAC)


def test_normalize_targets():
    assert normalize_targets(None) is None
    assert normalize_targets([]) is None
    assert normalize_targets(("a", "b")) == ["a", "b"]
    with pytest.raises(InputTypeError):
        normalize_targets(["a", "a"])


def test_global_means_returns_new_series(sample_set_factory):
    ref = sample_set_factory([[1.0, 3.0], [2.0, 2.0]], [10, 20])
    before = ref.values.copy()
    gm = global_means(ref, assay=Assay.BISULFITE)
    assert isinstance(gm, pd.Series)
    pd.testing.assert_frame_equal(ref.values, before)
