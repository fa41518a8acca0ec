"""Archive intake and flag-file collaborator.

Deployment state of an archive is encoded by zero-byte sentinel files next
to it: ``<archive>.dodeploy`` requests deployment, ``<archive>.deployed``
marks a deployed application. The external scanner reads these flags and
performs the actual extraction; this module only creates and removes them.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
import zipfile
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from appserver.core.exceptions import ExtractionError
from appserver.core.utils.io import remove_file, touch_file

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ArchiveFlag(str, Enum):
    DODEPLOY = ".dodeploy"
    DEPLOYED = ".deployed"


def flag_path(archive: PathLike, flag: ArchiveFlag) -> Path:
    """Return the sentinel path of ``flag`` for ``archive``."""
    archive = Path(archive)
    return archive.with_name(archive.name + flag.value)


class ExtractorInterface(ABC):
    """Contract of the archive extraction collaborator."""

    EXTENSION_SUFFIX: str = ".zip"

    def __init__(self, deploy_dir: PathLike) -> None:
        self.deploy_dir = Path(deploy_dir)

    @property
    def extension_suffix(self) -> str:
        return self.EXTENSION_SUFFIX

    @abstractmethod
    def soak_archive(self, location: PathLike) -> Path:
        """Take the archive at ``location`` into the deploy directory."""

    @abstractmethod
    def flag_archive(self, archive: PathLike, flag: ArchiveFlag) -> Path:
        """Create the ``flag`` sentinel for ``archive``."""

    @abstractmethod
    def unflag_archive(self, archive: PathLike) -> bool:
        """Remove the ``deployed`` sentinel of ``archive``."""


class FlagFileExtractor(ExtractorInterface):
    """Filesystem implementation working on zip archives.

    Args:
        deploy_dir: Managed deploy directory
        suffix: Archive file-name suffix (``.zip`` by default)
    """

    def __init__(
        self,
        deploy_dir: PathLike,
        *,
        suffix: str = ExtractorInterface.EXTENSION_SUFFIX,
    ) -> None:
        super().__init__(deploy_dir)
        self._suffix = suffix

    @property
    def extension_suffix(self) -> str:
        return self._suffix

    def soak_archive(self, location: PathLike) -> Path:
        """Copy the archive at ``location`` into the deploy directory.

        Raises:
            ExtractionError: If the archive is missing or unreadable, is not a
                zip archive, has the wrong suffix, or is already present
        """
        source = Path(location)
        if not source.is_file() or not os.access(source, os.R_OK):
            raise ExtractionError(
                f"Archive {source} does not exist or is not readable", archive=str(source)
            )
        if not source.name.endswith(self.extension_suffix):
            raise ExtractionError(
                f"Archive {source.name} does not end with {self.extension_suffix}",
                archive=str(source),
            )
        if not zipfile.is_zipfile(source):
            raise ExtractionError(f"Archive {source} is not a valid archive", archive=str(source))

        target = self.deploy_dir / source.name
        if target.exists():
            raise ExtractionError(
                f"Archive {target.name} already exists in {self.deploy_dir}",
                archive=str(target),
            )

        # Copy under a temporary name the scanner ignores, then rename into place
        tmp_path: Optional[Path] = None
        try:
            self.deploy_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.deploy_dir), prefix=f".{source.name}.", suffix=".part"
            )
            os.close(fd)
            tmp_path = Path(tmp_name)
            shutil.copy2(source, tmp_path)
            os.replace(str(tmp_path), str(target))
        except OSError as exc:
            raise ExtractionError(f"Cannot soak {source}: {exc}", archive=str(source)) from exc
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
        logger.info("Soaked archive %s into %s", source, self.deploy_dir)
        return target

    def flag_archive(self, archive: PathLike, flag: ArchiveFlag) -> Path:
        """Create the zero-byte ``flag`` sentinel, leaving other flags alone.

        Raises:
            ExtractionError: If the sentinel cannot be created
        """
        sentinel = flag_path(archive, flag)
        try:
            touch_file(sentinel)
        except OSError as exc:
            raise ExtractionError(f"Cannot create {sentinel}: {exc}", archive=str(archive)) from exc
        logger.info("Flagged %s with %s", Path(archive).name, flag.value)
        return sentinel

    def unflag_archive(self, archive: PathLike) -> bool:
        """Remove the ``deployed`` sentinel if present.

        Returns:
            True when a sentinel was removed

        Raises:
            ExtractionError: If the sentinel exists but cannot be removed
        """
        sentinel = flag_path(archive, ArchiveFlag.DEPLOYED)
        try:
            removed = remove_file(sentinel)
        except OSError as exc:
            raise ExtractionError(f"Cannot remove {sentinel}: {exc}", archive=str(archive)) from exc
        if removed:
            logger.info("Unflagged %s", Path(archive).name)
        return removed


__all__ = [
    "ArchiveFlag",
    "ExtractorInterface",
    "FlagFileExtractor",
    "flag_path",
]
