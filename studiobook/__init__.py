"""
studiobook - appointment book for a single-professional beauty studio.
"""

__version__ = "0.1.0"
