from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np
import pandas as pd

MODEL_METHODS = ("lm", "glm", "rlm", "mixed", "loess", "gam")


@dataclass(frozen=True)
class ModelConfig:
    """
    Immutable configuration for one model fit.

    - method: lm | glm | rlm | mixed | loess | gam
    - formula: "response ~ terms"; gam marks smooth terms as s(var)
    - groups: grouping column for the random intercept of mixed models
    - family: glm/gam family name (gaussian, poisson, binomial, gamma)
    - span: loess smoothing fraction
    - smooth_df: basis size of each gam smooth term
    """

    method: str
    formula: str
    groups: Optional[str] = None
    family: Optional[str] = None
    span: float = 0.75
    smooth_df: int = 6


@dataclass
class ModelResult:
    """
    A fitted model plus the rows it was fitted on.

    Columns of `data` are restricted to the formula variables (and the
    grouping column); rows with missing values were dropped before fitting.
    `observed` is the evaluated response (e.g. log(price) for
    "np.log(price) ~ ..."), aligned with `data`.
    """

    config: ModelConfig
    data: pd.DataFrame
    observed: pd.Series
    fitted: pd.Series
    model: Any = field(repr=False)

    @property
    def residuals(self) -> pd.Series:
        """Observed minus fitted, row for row."""
        return (self.observed - self.fitted).rename("resid")

    def predict(self, newdata: pd.DataFrame) -> pd.Series:
        from gg_notes.models.fitting import predict

        return predict(self, newdata)

    def predict_interval(self, newdata: pd.DataFrame, level: float = 0.95) -> pd.DataFrame:
        from gg_notes.models.fitting import predict_interval

        return predict_interval(self, newdata, level=level)

    def summary(self) -> str:
        if hasattr(self.model, "summary"):
            return str(self.model.summary())
        return (
            f"{self.config.method} fit of {self.config.formula} on {len(self.data)} rows; "
            f"residual sd = {float(np.std(self.residuals, ddof=1)):.4g}"
        )
