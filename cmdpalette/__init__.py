"""
cmdpalette - fuzzy command palette for editor hosts
"""

__version__ = "0.3.0"
