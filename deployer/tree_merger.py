"""
Configuration Tree Merger

Copies configuration files (group_vars, inventories, ...) from the internal
checkout into the external checkout before ansible runs.
"""

import shutil
from pathlib import Path
from typing import List, Optional

from deployer.exceptions import CopyError
from deployer.logger import DeployLogger


class ConfigTreeMerger:
    """
    Flattened copy of one directory tree into another.

    Every regular file found anywhere under the source lands directly in the
    destination under its base name. Nested directories are not reproduced
    and existing files are overwritten, so merging twice is a no-op. File
    modes are copied along with contents.
    """

    def __init__(self, logger: Optional[DeployLogger] = None):
        self.logger = logger

    def _log(self, message: str):
        if self.logger:
            self.logger.log(message)

    def collect_files(self, source: Path) -> List[Path]:
        """
        List regular files under ``source`` in sorted path order.

        Raises:
            CopyError: If ``source`` is not a readable directory
        """
        if not source.is_dir():
            raise CopyError(
                f"Cannot copy from {source}",
                context="Source directory does not exist",
            )

        try:
            files = sorted(p for p in source.rglob("*") if p.is_file())
        except OSError as e:
            raise CopyError(f"Cannot read {source}", context=str(e)) from e

        for path in files:
            self._log(f"Found file {path} to copy")
        return files

    def merge(self, source: Path, destination: Path) -> List[Path]:
        """
        Copy every file under ``source`` into ``destination``.

        Args:
            source: Directory to read from
            destination: Directory to write into (created if absent)

        Returns:
            Destination paths written, in copy order

        Raises:
            CopyError: If any read or write fails
        """
        self._log(f"Copying files from {source} to {destination}")
        files = self.collect_files(source)

        if not destination.is_dir():
            self._log(f"Creating {destination}")
            try:
                destination.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise CopyError(
                    f"Cannot create {destination}", context=str(e)
                ) from e

        written = []
        for path in files:
            target = destination / path.name
            self._log(f"Copying {path} to {target}")
            try:
                shutil.copy(path, target)
            except OSError as e:
                raise CopyError(
                    f"Failed to copy {path} to {target}", context=str(e)
                ) from e
            written.append(target)

        return written

    def merge_subdirs(
        self, source_root: Path, destination_root: Path, subdirs
    ) -> List[Path]:
        """Merge each named subdirectory of ``source_root`` into ``destination_root``."""
        written = []
        for name in subdirs:
            written.extend(self.merge(source_root / name, destination_root / name))
        return written
