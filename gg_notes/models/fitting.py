from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Tuple, Union

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from statsmodels.gam.api import BSplines, GLMGam
from statsmodels.nonparametric.smoothers_lowess import lowess

from gg_notes.core.exceptions import ModelConfigError
from gg_notes.core.prep import expand_grid
from gg_notes.models.model_config import MODEL_METHODS, ModelConfig, ModelResult

logger = logging.getLogger(__name__)

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SMOOTH_TERM = re.compile(r"s\(\s*([A-Za-z_][A-Za-z0-9_]*)\s*\)")

_FAMILIES = {
    "gaussian": sm.families.Gaussian,
    "poisson": sm.families.Poisson,
    "binomial": sm.families.Binomial,
    "gamma": sm.families.Gamma,
}


# -----------------------------------------------------------------------------
# Formula helpers
# -----------------------------------------------------------------------------
def _split_formula(formula: str) -> Tuple[str, str]:
    if formula.count("~") != 1:
        raise ModelConfigError(f"Formula must have the form 'response ~ terms', got '{formula}'")
    lhs, rhs = (part.strip() for part in formula.split("~"))
    if not lhs or not rhs:
        raise ModelConfigError(f"Formula must have the form 'response ~ terms', got '{formula}'")
    return lhs, rhs


def formula_variables(formula: str, columns: Iterable[str]) -> List[str]:
    """Columns referenced by the formula, in the order they appear."""
    available = set(columns)
    seen: Dict[str, None] = {}
    for name in _NAME.findall(formula):
        if name in available:
            seen.setdefault(name, None)
    return list(seen)


def _family(name: Union[str, None]) -> Any:
    if name is None:
        return sm.families.Gaussian()
    try:
        return _FAMILIES[name]()
    except KeyError:
        raise ModelConfigError(f"Unknown family '{name}'. Expected one of {sorted(_FAMILIES)}")


def _restrict(frame: pd.DataFrame, config: ModelConfig) -> pd.DataFrame:
    lhs, _ = _split_formula(config.formula)
    variables = formula_variables(config.formula, frame.columns)

    if not formula_variables(lhs, frame.columns):
        raise ModelConfigError(
            f"Response of '{config.formula}' does not reference any column. "
            f"Available columns: {list(map(str, frame.columns))}"
        )

    if config.groups is not None:
        if config.groups not in frame.columns:
            raise ModelConfigError(f"Grouping column '{config.groups}' not found")
        if config.groups not in variables:
            variables.append(config.groups)

    return frame[variables].dropna()


# -----------------------------------------------------------------------------
# Per-method fitting
# -----------------------------------------------------------------------------
def _fit_formula_model(data: pd.DataFrame, config: ModelConfig) -> Any:
    if config.method == "lm":
        return smf.ols(config.formula, data=data).fit()
    if config.method == "glm":
        return smf.glm(config.formula, data=data, family=_family(config.family)).fit()
    if config.method == "rlm":
        return smf.rlm(config.formula, data=data).fit()
    if config.method == "mixed":
        if config.groups is None:
            raise ModelConfigError("Mixed models need a 'groups' column")
        return smf.mixedlm(config.formula, data=data, groups=config.groups).fit()
    raise ModelConfigError(f"Method '{config.method}' is not a formula model")


def _fit_loess(data: pd.DataFrame, config: ModelConfig) -> ModelResult:
    lhs, rhs = _split_formula(config.formula)
    if lhs not in data.columns or rhs not in data.columns:
        raise ModelConfigError(f"loess takes a single 'y ~ x' formula of plain columns, got '{config.formula}'")

    # it=0: plain local regression, no robustness reweighting
    fitted = lowess(
        data[lhs].to_numpy(dtype=float),
        data[rhs].to_numpy(dtype=float),
        frac=config.span,
        it=0,
        return_sorted=False,
    )
    # Curve for prediction: one fitted value per distinct x
    curve = (
        pd.DataFrame({"x": data[rhs].to_numpy(dtype=float), "fit": fitted})
        .groupby("x", sort=True)["fit"]
        .mean()
    )
    return ModelResult(
        config=config,
        data=data,
        observed=data[lhs].astype(float),
        fitted=pd.Series(fitted, index=data.index, name="fitted"),
        model=curve,
    )


def _fit_gam(data: pd.DataFrame, config: ModelConfig) -> ModelResult:
    lhs, rhs = _split_formula(config.formula)
    smooth_vars = _SMOOTH_TERM.findall(rhs)
    if not smooth_vars:
        raise ModelConfigError(f"gam formula needs at least one s(var) term, got '{config.formula}'")

    linear_terms = [t.strip() for t in _SMOOTH_TERM.sub("", rhs).split("+") if t.strip()]
    linear_formula = f"{lhs} ~ {' + '.join(linear_terms) if linear_terms else '1'}"

    # The smoother basis must match the rows the linear part keeps after
    # evaluating transforms such as np.log(y)
    kept = smf.glm(linear_formula, data=data).data.row_labels
    fit_data = data.loc[kept]

    smoother = BSplines(
        fit_data[smooth_vars],
        df=[config.smooth_df] * len(smooth_vars),
        degree=[3] * len(smooth_vars),
    )
    model = GLMGam.from_formula(linear_formula, data=fit_data, smoother=smoother, family=_family(config.family))
    results = model.fit()
    return _result(config, data, results)


def _result(config: ModelConfig, data: pd.DataFrame, results: Any) -> ModelResult:
    """Wrap statsmodels results, aligned with the rows the model actually used."""
    kept = results.model.data.row_labels
    dropped = len(data) - len(kept)
    if dropped:
        logger.info(
            "%d rows removed: response or terms are NaN after transformation",
            dropped,
            extra={"formula": config.formula},
        )
    return ModelResult(
        config=config,
        data=data.loc[kept],
        observed=pd.Series(np.asarray(results.model.endog, dtype=float), index=kept, name="observed"),
        fitted=pd.Series(np.asarray(results.fittedvalues, dtype=float), index=kept, name="fitted"),
        model=results,
    )


def fit_model(frame: pd.DataFrame, config: ModelConfig) -> ModelResult:
    """
    Fit `config` to `frame`.

    The frame is restricted to the formula's columns and rows with missing
    values are dropped first. Rows whose transformed response or terms are
    NaN (np.log of a negative value) are then dropped by the formula engine.
    Errors from statsmodels itself (singular design, failed convergence)
    propagate unchanged.
    """
    if config.method not in MODEL_METHODS:
        raise ModelConfigError(f"Unknown model method '{config.method}'. Expected one of {list(MODEL_METHODS)}")

    data = _restrict(frame, config)
    if data.empty:
        raise ModelConfigError(f"No complete rows to fit '{config.formula}'")

    logger.debug(
        "Fitting model",
        extra={"method": config.method, "formula": config.formula, "n_obs": len(data)},
    )

    if config.method == "loess":
        return _fit_loess(data, config)
    if config.method == "gam":
        return _fit_gam(data, config)

    return _result(config, data, _fit_formula_model(data, config))


# -----------------------------------------------------------------------------
# Prediction
# -----------------------------------------------------------------------------
def predict(result: ModelResult, newdata: pd.DataFrame) -> pd.Series:
    """Predictions on newdata; mixed models predict from the fixed effects only."""
    config = result.config

    if config.method == "loess":
        _, rhs = _split_formula(config.formula)
        curve: pd.Series = result.model
        values = np.interp(newdata[rhs].to_numpy(dtype=float), curve.index.to_numpy(), curve.to_numpy())
        return pd.Series(values, index=newdata.index, name="pred")

    if config.method == "gam":
        smooth_vars = _SMOOTH_TERM.findall(_split_formula(config.formula)[1])
        values = result.model.predict(exog=newdata, exog_smooth=newdata[smooth_vars], transform=True)
        return pd.Series(np.asarray(values, dtype=float), index=newdata.index, name="pred")

    values = result.model.predict(newdata)
    return pd.Series(np.asarray(values, dtype=float), index=newdata.index, name="pred")


def predict_interval(result: ModelResult, newdata: pd.DataFrame, level: float = 0.95) -> pd.DataFrame:
    """
    Fit plus a confidence band for the mean.

    lm and glm provide standard errors; the other methods return NaN bounds.
    """
    if result.config.method in ("lm", "glm"):
        frame = result.model.get_prediction(newdata).summary_frame(alpha=1 - level)
        return pd.DataFrame(
            {
                "fit": frame["mean"].to_numpy(),
                "lower": frame["mean_ci_lower"].to_numpy(),
                "upper": frame["mean_ci_upper"].to_numpy(),
                "se": frame["mean_se"].to_numpy(),
            },
            index=newdata.index,
        )

    fit = predict(result, newdata)
    return pd.DataFrame(
        {"fit": fit.to_numpy(), "lower": np.nan, "upper": np.nan, "se": np.nan},
        index=newdata.index,
    )


def prediction_grid(frame: pd.DataFrame, **domains: Any) -> pd.DataFrame:
    """
    Cross-product of variable domains to predict on.

    Each domain is either:
    - "levels": the distinct values of that column (category order if categorical)
    - an int n: n evenly spaced points over the column's range
    - an explicit iterable of values
    """
    if not domains:
        raise ModelConfigError("prediction_grid needs at least one variable domain")

    resolved: Dict[str, Iterable[Any]] = {}
    for name, spec in domains.items():
        if isinstance(spec, str):
            if spec != "levels":
                raise ModelConfigError(f"Unknown domain spec '{spec}' for '{name}'")
            column = frame[name]
            if isinstance(column.dtype, pd.CategoricalDtype):
                resolved[name] = list(column.cat.categories)
            else:
                resolved[name] = sorted(column.dropna().unique().tolist())
        elif isinstance(spec, (int, np.integer)) and not isinstance(spec, bool):
            column = frame[name].astype(float)
            resolved[name] = np.linspace(column.min(), column.max(), int(spec)).tolist()
        else:
            resolved[name] = list(spec)

    return expand_grid(**resolved)


def add_predictions(frame: pd.DataFrame, result: ModelResult, name: str = "pred") -> pd.DataFrame:
    """Attach predictions for every row of frame under `name`."""
    out = frame.copy()
    out[name] = predict(result, frame).to_numpy()
    return out


def add_residuals(frame: pd.DataFrame, result: ModelResult, name: str = "resid") -> pd.DataFrame:
    """
    Attach observed-minus-fitted residuals under `name`.

    Rows that were not part of the fit (dropped for missing values) get NaN.
    """
    out = frame.copy()
    out[name] = result.residuals.reindex(frame.index)
    return out
