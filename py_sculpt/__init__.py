"""
py-sculpt: real-time procedural height-field sculpting.
"""

__version__ = "0.1.0"
