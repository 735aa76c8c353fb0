import numpy as np
import pandas as pd
import pytest

from compartment_shrinkage.samples import SampleSet


def make_sample_set(values, starts, chrom="chr1", columns=None):
    values = np.asarray(values, dtype=np.float64)
    if values.ndim == 1:
        values = values[:, None]
    starts = np.asarray(starts, dtype=np.int64)
    ids = [f"f{i}" for i in range(len(starts))]
    columns = columns or [f"S{j + 1}" for j in range(values.shape[1])]
    coords = pd.DataFrame({"chrom": chrom, "start": starts, "end": starts + 1}, index=ids)
    return SampleSet(values=pd.DataFrame(values, index=ids, columns=columns), coords=coords)


@pytest.fixture
def sample_set_factory():
    return make_sample_set
