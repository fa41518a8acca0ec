"""
appserver - application server configuration and deployment core

Builds the typed configuration-node tree of a multi-component server runtime
and drives the flag-file lifecycle of packaged application archives.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
