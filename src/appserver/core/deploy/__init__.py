"""Application archive deployment.

- **Extractor**: archive intake and flag-file collaborator
- **DeploymentController**: flag-file state machine per application archive
"""
from __future__ import annotations

from .extractor import ArchiveFlag, ExtractorInterface, FlagFileExtractor, flag_path
from .controller import DeploymentController, DeploymentState

__all__ = [
    "ArchiveFlag",
    "ExtractorInterface",
    "FlagFileExtractor",
    "flag_path",
    "DeploymentController",
    "DeploymentState",
]
