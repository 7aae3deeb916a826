"""Discovery of Norg files from command line arguments."""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

NORG_EXTENSION = ".norg"

logger = logging.getLogger(__name__)


def is_norg_file(path: Path) -> bool:
    return path.suffix == NORG_EXTENSION


def get_files_from_folders(
    paths: Iterable[Union[str, Path]],
    ignored_filenames: Optional[Iterable[str]] = None,
) -> List[Path]:
    """
    Expand folders into the Norg files directly inside them.

    Folders are not searched recursively. Files given explicitly are kept
    as given, whatever their name or extension.

    Args:
        paths: Files and folders from the command line
        ignored_filenames: Bare file names to leave out of folder listings

    Returns:
        List of file paths
    """
    ignored = set(ignored_filenames or ())
    files: List[Path] = []

    for entry in paths:
        path = Path(entry)
        if not path.is_dir():
            files.append(path)
            continue

        for child in sorted(path.iterdir()):
            if not child.is_file() or not is_norg_file(child):
                continue
            if child.name in ignored:
                logger.debug(f"Ignoring {child}")
                continue
            files.append(child)

    return files
