"""
Top-level package for the gg_notes tutorial notes.

The notes reproduce textbook plots from the layered grammar of graphics as
executable chunks rendered with plotly. Most code should import from
submodules such as:
    gg_notes.core
    gg_notes.models
    gg_notes.notes
    gg_notes.ui
"""

__version__ = "0.1.0"

__all__: list[str] = ["__version__"]
