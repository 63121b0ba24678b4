from .model_config import MODEL_METHODS, ModelConfig, ModelResult
from .fitting import (
    add_predictions,
    add_residuals,
    fit_model,
    formula_variables,
    prediction_grid,
)

__all__ = [
    "MODEL_METHODS",
    "ModelConfig",
    "ModelResult",
    "add_predictions",
    "add_residuals",
    "fit_model",
    "formula_variables",
    "prediction_grid",
]
