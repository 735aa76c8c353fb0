from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from .assays import DEFAULT_ASSAY, Assay, to_model_scale
from .errors import InputTypeError, InsufficientTargets
from .samples import SampleSet


def normalize_targets(targets: str | Iterable[str] | None) -> list[str] | None:
    """Return target names as a list, or None for an untargeted call.

    An empty collection counts as untargeted; a single name is rejected because the
    spread of one sample is undefined.
    """
    if targets is None:
        return None
    names = [targets] if isinstance(targets, str) else [str(t) for t in targets]
    if not names:
        return None
    if len(names) == 1:
        raise InsufficientTargets(
            f"Cannot perform targeted bin-level shrinkage with one target sample ({names[0]!r})"
        )
    if len(set(names)) != len(names):
        raise InputTypeError(f"Duplicate target names: {names}")
    return names


def global_means(
    reference: SampleSet,
    targets: str | Iterable[str] | None = None,
    *,
    assay: Assay | str = DEFAULT_ASSAY,
    logit_transform: bool = True,
) -> pd.Series:
    """Per-feature mean across the reference columns (or just the targets).

    The mean is taken on the model scale, so array beta values are averaged as M-values.
    """
    assay = Assay.coerce(assay)
    names = normalize_targets(targets)
    ref = reference if names is None else reference.select(names)
    X = to_model_scale(ref.matrix(), assay, logit_transform=logit_transform)
    return pd.Series(X.mean(axis=1), index=ref.values.index, name="globalMean", dtype=np.float64)
