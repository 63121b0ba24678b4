from __future__ import annotations

import numpy as np
import pandas as pd

from gg_notes.core import aes, geom_line, geom_point, geom_smooth, ggplot, labs
from gg_notes.models import ModelConfig, add_predictions, add_residuals, fit_model, prediction_grid
from gg_notes.notes.chunk import ChunkOptions
from gg_notes.notes.document import Document, ExampleRef, Prose
from gg_notes.notes.example_base import BaseExample

CHAPTER = "data-analysis"


class AnalysisResiduals(BaseExample):
    """
    Removing a trend: fit log(tip) on log(bill) and plot what is left over.
    Residuals are observed minus fitted.
    """

    id = "analysis_residuals"
    label = "Residuals of a log-log fit"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        tips = self.dataset("tips").frame
        tips = tips.assign(log_bill=np.log(tips["total_bill"]), log_tip=np.log(tips["tip"]))
        fit = fit_model(tips, ModelConfig(method="lm", formula="log_tip ~ log_bill"))
        return add_residuals(tips, fit)

    def build_plot(self, data):
        return (
            ggplot(data, aes(x="log_bill", y="resid"))
            + geom_point(alpha=0.4)
            + geom_smooth(method="loess", span=0.5)
            + labs(x="log(total_bill)", y="residual of log(tip)")
        )


class AnalysisResidualsByGroup(BaseExample):
    """Residuals against a variable left out of the model show what it explains."""

    id = "analysis_residuals_by_group"
    label = "Residuals by day"
    chapter = CHAPTER
    options = ChunkOptions(width=6, height=4)
    datasets = ("tips",)

    def compute_data(self):
        tips = self.dataset("tips").frame
        fit = fit_model(tips, ModelConfig(method="lm", formula="tip ~ total_bill"))
        return add_residuals(tips, fit)

    def build_plot(self, data):
        return ggplot(data, aes(x="day", y="resid")) + geom_point(position="jitter", alpha=0.5, seed=self.seed)


class AnalysisPredictionGrid(BaseExample):
    """
    Visualising a model: predict on the full cross-product of twenty bill
    values and both smoker levels, then draw the predictions over the data.
    """

    id = "analysis_prediction_grid"
    label = "Interaction of bill and smoker"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        tips = self.dataset("tips").frame
        fit = fit_model(tips, ModelConfig(method="lm", formula="tip ~ total_bill * smoker"))
        grid = prediction_grid(tips, total_bill=20, smoker="levels")
        return {"observed": tips, "grid": add_predictions(grid, fit)}

    def build_plot(self, data):
        return (
            ggplot(data["grid"], aes(x="total_bill", y="pred", colour="smoker"))
            + geom_point(aes(y="tip"), data=data["observed"], alpha=0.3)
            + geom_line(size=1)
            + labs(y="tip")
        )


class AnalysisRobustFit(BaseExample):
    """A robust fit is pulled less by the few very large tips than least squares."""

    id = "analysis_robust_fit"
    label = "Least squares against robust regression"
    chapter = CHAPTER
    datasets = ("tips",)

    def compute_data(self):
        tips = self.dataset("tips").frame
        grid = prediction_grid(tips, total_bill=30)
        for method in ("lm", "rlm"):
            fit = fit_model(tips, ModelConfig(method=method, formula="tip ~ total_bill"))
            grid = add_predictions(grid, fit, name=method)
        lines = grid.melt(id_vars="total_bill", var_name="model", value_name="pred")
        return {"observed": tips, "lines": lines}

    def build_plot(self, data):
        return (
            ggplot(data["observed"], aes(x="total_bill", y="tip"))
            + geom_point(alpha=0.3)
            + geom_line(aes(y="pred", colour="model"), data=data["lines"], size=1)
        )


class AnalysisMixedModel(BaseExample):
    """
    A mixed model with a random intercept per country. The lines are the
    within-country residuals around the fixed-effect trend.
    """

    id = "analysis_mixed_model"
    label = "European life expectancy, mixed model residuals"
    chapter = CHAPTER
    options = ChunkOptions(width=8, height=5, suppress_warnings=True)
    datasets = ("gapminder",)

    def compute_data(self):
        europe = self.dataset("gapminder").subset(continent="Europe").frame
        europe = europe.assign(year0=europe["year"] - 1952)
        fit = fit_model(europe, ModelConfig(method="mixed", formula="lifeExp ~ year0", groups="country"))
        return add_residuals(europe, fit).sort_values(["country", "year"])

    def build_plot(self, data):
        return (
            ggplot(data, aes(x="year", y="resid", group="country"))
            + geom_line(alpha=0.3)
            + geom_smooth(aes(x="year", y="resid"), inherit_aes=False, method="loess")
        )


class AnalysisGamSmooth(BaseExample):
    """An additive model smoother: a penalised spline in GDP."""

    id = "analysis_gam_smooth"
    label = "GAM smoother"
    chapter = CHAPTER
    datasets = ("gapminder",)

    def compute_data(self):
        gap = self.dataset("gapminder").subset(year=2007).frame
        return gap.assign(log_gdp=np.log10(gap["gdpPercap"]))

    def build_plot(self, data):
        return ggplot(data, aes(x="log_gdp", y="lifeExp")) + geom_point() + geom_smooth(method="gam")


class AnalysisModelTable(BaseExample):
    """Predictions from several continents in one long table, one line each."""

    id = "analysis_model_table"
    label = "Per-continent linear trends"
    chapter = CHAPTER
    options = ChunkOptions(width=8, height=4)
    datasets = ("gapminder",)

    def compute_data(self):
        gap = self.dataset("gapminder").frame
        pieces = []
        for continent, sub in gap.groupby("continent", sort=True):
            fit = fit_model(sub, ModelConfig(method="lm", formula="lifeExp ~ year"))
            grid = prediction_grid(sub, year="levels")
            pieces.append(add_predictions(grid, fit).assign(continent=continent))
        return pd.concat(pieces, ignore_index=True)

    def build_plot(self, data):
        return ggplot(data, aes(x="year", y="pred", colour="continent")) + geom_line() + labs(y="predicted lifeExp")


EXAMPLES = [
    AnalysisResiduals,
    AnalysisResidualsByGroup,
    AnalysisPredictionGrid,
    AnalysisRobustFit,
    AnalysisMixedModel,
    AnalysisGamSmooth,
    AnalysisModelTable,
]

DOCUMENT = Document(
    id=CHAPTER,
    title="Data analysis",
    subtitle="Models, predictions and residuals",
    blocks=(
        Prose(
            "Plots and models work best together. A model removes a strong pattern so that "
            "subtler ones become visible in its residuals."
        ),
        ExampleRef("analysis_residuals"),
        ExampleRef("analysis_residuals_by_group"),
        Prose(
            "## Prediction grids\n\n"
            "To see what a model says, predict on a grid that covers every combination of its inputs "
            "and add the predictions back as a column called `pred`."
        ),
        ExampleRef("analysis_prediction_grid"),
        ExampleRef("analysis_robust_fit"),
        ExampleRef("analysis_model_table"),
        Prose("## Other models"),
        ExampleRef("analysis_mixed_model"),
        ExampleRef("analysis_gam_smooth"),
    ),
)
