"""
Read-only source-tree inspector used by the compliance controls.

Enumerates text files below a root (skipping hidden and vendor directories)
and tests their contents against textual signals. Reads are synchronous and
idempotent; the inspector never writes.
"""

import os
import re
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Pattern, Tuple, Union

from readiness.utils.logger import get_logger
from readiness.config import SOURCE_EXTENSIONS, SKIP_DIRECTORIES, MAX_SCAN_FILE_SIZE

logger = get_logger(__name__)


def glob_match(parts: Tuple[str, ...], pattern_parts: Tuple[str, ...]) -> bool:
    """Segment-wise glob match; a '**' segment consumes zero or more segments."""
    if not pattern_parts:
        return not parts
    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == '**':
        return any(glob_match(parts[i:], rest) for i in range(len(parts) + 1))
    return bool(parts) and fnmatchcase(parts[0], head) and glob_match(parts[1:], rest)


class SourceTreeInspector:
    """
    Textual signal lookups over the target's own source tree.

    Args:
        root: Directory holding the target's sources and configuration
        extensions: File extensions considered text sources
        environ: Environment mapping for env signals (default os.environ)
    """

    def __init__(
        self,
        root: Union[str, Path],
        extensions: Iterable[str] = SOURCE_EXTENSIONS,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.root = Path(root)
        self.extensions = tuple(extensions)
        self.environ = environ if environ is not None else os.environ
        self._content_cache: Dict[Path, str] = {}

    def _is_skipped_dir(self, name: str) -> bool:
        return name.startswith('.') or name in SKIP_DIRECTORIES

    def iter_files(self, scope: str = '.') -> Iterator[Path]:
        """Yield text files under *scope* (a file or directory relative to root)."""
        base = self.root / scope
        if base.is_file():
            yield base
            return
        if not base.is_dir():
            return

        for dirpath, dirnames, filenames in os.walk(base):
            dirnames[:] = sorted(d for d in dirnames if not self._is_skipped_dir(d))
            for filename in sorted(filenames):
                if filename.endswith(self.extensions):
                    yield Path(dirpath) / filename

    def read(self, path: Path) -> str:
        """Return the text content of *path* ('' when unreadable or too large)."""
        if path in self._content_cache:
            return self._content_cache[path]
        try:
            if path.stat().st_size > MAX_SCAN_FILE_SIZE:
                content = ''
            else:
                content = path.read_text(encoding='utf-8', errors='ignore')
        except OSError as e:
            logger.debug(f"Cannot read {path}: {e}")
            content = ''
        self._content_cache[path] = content
        return content

    def find_files(self, pattern: str) -> List[Path]:
        """
        Match *pattern* against paths relative to root.

        Uses glob syntax ('**' spans any number of directories, including
        none) and matches directories as well as files. Hidden and vendor
        directories are pruned from the walk, never entered.
        """
        pattern_parts = tuple(part for part in pattern.split('/') if part and part != '.')
        recursive = '**' in pattern_parts
        matches = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if not self._is_skipped_dir(d))
            relative = Path(dirpath).relative_to(self.root).parts
            for name in dirnames + filenames:
                if glob_match(relative + (name,), pattern_parts):
                    matches.append(Path(dirpath) / name)
            if not recursive and len(relative) + 2 > len(pattern_parts):
                dirnames[:] = []
        return sorted(matches)

    def file_exists(self, pattern: str) -> bool:
        return bool(self.find_files(pattern))

    def search(self, pattern: Union[str, Pattern], scope: str = '.') -> Optional[Path]:
        """Return the first file under *scope* whose content matches *pattern*."""
        regex = re.compile(pattern, re.IGNORECASE) if isinstance(pattern, str) else pattern
        for path in self.iter_files(scope):
            if regex.search(self.read(path)):
                return path
        return None

    def contains(self, pattern: Union[str, Pattern], scope: str = '.') -> bool:
        return self.search(pattern, scope) is not None

    def env_present(self, name: str) -> bool:
        return bool(self.environ.get(name))

    def env_contains(self, name: str, pattern: str) -> bool:
        value = self.environ.get(name) or ''
        return re.search(pattern, value, re.IGNORECASE) is not None
