"""
Allow running the package directly: python -m newton_fractal
"""
from .app import run

run()
