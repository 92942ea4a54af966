"""
Debris Tracker - orbital object visualization engine.

Turns three-line element records into moving screen positions with fading
trails, resolves pointer hover against the moving set, and produces the
year-stepped debris growth forecast shown in the predictions view.
"""

__version__ = "0.1.0"
