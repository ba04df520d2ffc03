"""
codetheater.render - Terminal rendering of screenplays.
"""

from codetheater.render.screenplay import ScreenplayElement, parse_screenplay
from codetheater.render.theater import TheaterRenderer

__all__ = ["ScreenplayElement", "TheaterRenderer", "parse_screenplay"]
