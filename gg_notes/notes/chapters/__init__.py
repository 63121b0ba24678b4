"""
Chapters of the notes, in reading order.

Each module exposes EXAMPLES (the chunk classes) and DOCUMENT (the prose
with references to those chunks).
"""
from . import analysis, getting_started, grammar, layers, toolbox

CHAPTERS = [getting_started, grammar, layers, toolbox, analysis]

__all__ = ["CHAPTERS"]
