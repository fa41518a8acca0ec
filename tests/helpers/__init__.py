"""Test helper modules for the appserver test suite.

- builders: sample configuration documents, descriptors and archives
- io_utils: writers for settings files under an isolated root
"""
from __future__ import annotations
