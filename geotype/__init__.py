"""Geotype - Render GeoJSON as a tile grid in the terminal"""

__version__ = "0.1.0"
__author__ = "Geotype Team"
__description__ = "Terminal renderer that draws GeoJSON features as a grid of web-mercator tiles"

# Import main entry point
from .main import main

__all__ = ['main']
