"""
Allow running studiobook via ``python -m studiobook``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
