"""
Checkout Workspace

Resets checkout directories so every clone starts from an empty path.
"""

import shutil
from dataclasses import dataclass
from pathlib import Path

from deployer.exceptions import WorkspaceError


@dataclass(frozen=True)
class CheckoutDirectory:
    """A checkout that is about to be (re)created by a clone."""

    label: str
    path: Path
    repo_url: str
    branch: str

    def reset(self) -> bool:
        """
        Remove whatever currently occupies the checkout path.

        Returns:
            True if something was removed

        Raises:
            WorkspaceError: If the stale directory cannot be deleted
        """
        if not self.path.exists() and not self.path.is_symlink():
            return False

        try:
            if self.path.is_dir() and not self.path.is_symlink():
                shutil.rmtree(self.path)
            else:
                self.path.unlink()
        except OSError as e:
            raise WorkspaceError(
                f"Could not remove stale checkout {self.path}",
                context=str(e),
            ) from e
        return True
