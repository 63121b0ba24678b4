"""
UI adapters for the notes.

Currently provides a Dash-based document browser via create_dash_app().
"""

from .dash_app import create_dash_app

__all__ = ["create_dash_app"]
