"""Lifecycle of the directory holding generated test files."""

import logging
import shutil
from pathlib import Path

from testdispatch.core.errors import ArtifactDirectoryCollisionError

logger = logging.getLogger(__name__)

# Reserved name of the directory created under the project's test root.
GENERATED_DIR_NAME = "__test_runner"


def generated_directory_path(test_root: Path | str) -> Path:
    """Return where the generated files directory lives for ``test_root``."""
    return Path(test_root).resolve() / GENERATED_DIR_NAME


def ensure_generated_directory(test_root: Path | str) -> Path:
    """Return the generated files directory, creating it if needed.

    Safe to call from concurrent runners: an already existing directory is
    reused.

    Raises:
        ArtifactDirectoryCollisionError: If the path exists and is not a directory
    """
    path = generated_directory_path(test_root)
    try:
        path.mkdir(exist_ok=True)
    except FileExistsError as e:
        raise ArtifactDirectoryCollisionError(
            f"{path} already exists and is not a directory."
        ) from e

    if not path.is_dir():
        raise ArtifactDirectoryCollisionError(f"{path} already exists and is not a directory.")
    return path


def delete_generated_directory(test_root: Path | str) -> bool:
    """Delete the generated files directory.

    Returns:
        True if a directory existed and was deleted, False otherwise
    """
    path = generated_directory_path(test_root)
    if not path.is_dir():
        return False

    shutil.rmtree(path)
    logger.debug("Deleted generated files directory %s", path)
    return True
