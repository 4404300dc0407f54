"""
File scanner for llm.txt documents.

Resolves command-line paths to the llm.txt files to validate: files are
taken as given, directories are scanned recursively for `llm.txt` /
`llms.txt`, skipping common build, cache and virtualenv directories.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Set
import logging

logger = logging.getLogger(__name__)


class FileScanner:
    """
    Recursively scan a directory for llm.txt documents.

    Excludes common non-documentation directories:
    - node_modules, .git, __pycache__, .venv, venv, build, dist, etc.
    """

    # File names recognised as llm.txt documents
    DEFAULT_FILENAMES = {'llm.txt', 'llms.txt'}

    # Directories to exclude from scanning
    DEFAULT_EXCLUDE_DIRS = {
        'node_modules',
        '.git',
        '__pycache__',
        '.pytest_cache',
        '.venv',
        'venv',
        'env',
        'build',
        'dist',
        '.cache',
        '.tox',
        'site',  # MkDocs build output
        '_build',  # Sphinx build output
    }

    def __init__(
        self,
        base_path: Path,
        filenames: Optional[Set[str]] = None,
        exclude_dirs: Optional[Set[str]] = None
    ):
        """
        Initialize the file scanner.

        Args:
            base_path: Base directory to scan
            filenames: File names to include (default: llm.txt, llms.txt)
            exclude_dirs: Directory names to exclude (default: common build/cache dirs)
        """
        self.base_path = Path(base_path).resolve()
        self.filenames = {name.lower() for name in (filenames or self.DEFAULT_FILENAMES)}
        self.exclude_dirs = exclude_dirs or self.DEFAULT_EXCLUDE_DIRS

        if not self.base_path.exists():
            raise ValueError(f"Base path does not exist: {self.base_path}")

        if not self.base_path.is_dir():
            raise ValueError(f"Base path is not a directory: {self.base_path}")

    def scan(self) -> List[Path]:
        """
        Scan the base directory recursively for llm.txt files.

        Returns:
            Sorted list of matching paths
        """
        found = []

        logger.info(f"Scanning for llm.txt files: {self.base_path}")
        logger.debug(f"Looking for file names: {', '.join(sorted(self.filenames))}")

        for file_path in self._walk_directory(self.base_path):
            if file_path.name.lower() in self.filenames:
                found.append(file_path)
                logger.debug(f"Found llm.txt file: {file_path.relative_to(self.base_path)}")

        # Sort for consistent ordering
        found.sort()

        if not found:
            logger.warning(f"No llm.txt files found under {self.base_path}")
        else:
            logger.info(f"Found {len(found)} llm.txt files")

        return found

    def _walk_directory(self, directory: Path):
        """
        Recursively walk directory, yielding files while respecting exclusions.

        Args:
            directory: Directory to walk

        Yields:
            Path objects for files found
        """
        try:
            entries = sorted(directory.iterdir())
        except PermissionError:
            logger.warning(f"Permission denied accessing: {directory}")
            return

        for item in entries:
            if item.is_dir():
                # Skip hidden and excluded directories
                if item.name.startswith('.') or item.name in self.exclude_dirs:
                    logger.debug(f"Skipping excluded directory: {item.name}")
                    continue
                yield from self._walk_directory(item)

            elif item.is_file():
                yield item


def discover_llm_txt(paths: Iterable[Path], filenames: Optional[Set[str]] = None) -> List[Path]:
    """
    Resolve files and directories to the llm.txt documents to validate.

    Explicit file paths are kept whatever their name; directories are
    scanned recursively. Duplicates are removed, first occurrence wins.

    Args:
        paths: Files or directories
        filenames: File names to look for inside directories

    Returns:
        List of document paths

    Raises:
        ValueError: If a path does not exist

    Example:
        >>> discover_llm_txt([Path("docs"), Path("extra/llm.txt")])
    """
    documents: List[Path] = []
    seen: Set[Path] = set()

    for path in paths:
        path = Path(path)
        if not path.exists():
            raise ValueError(f"Path does not exist: {path}")

        if path.is_dir():
            candidates = FileScanner(path, filenames=filenames).scan()
        else:
            candidates = [path.resolve()]

        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                documents.append(candidate)

    return documents
