"""
OpenDig: HTTP API and CLI around the dig command-line tool.

Entry points: opendig.app:app (uvicorn), opendig.cli:main
"""

__version__ = "0.1.0"
