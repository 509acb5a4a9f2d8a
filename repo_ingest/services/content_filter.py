"""
Content filtering for repository ingestion.
Decides which crawled files are worth fetching and embedding.
"""

from pathlib import PurePosixPath
from typing import FrozenSet, Optional

from ..core.config import (
    ALWAYS_INCLUDE_NAMES,
    BINARY_EXTENSIONS,
    CODE_EXTENSIONS,
    MAX_FILE_BYTES,
    SKIP_DIRS,
)
from ..core.models import FileEntry


class ContentFilter:
    """Filter crawled files by extension, size and location."""

    def __init__(
        self,
        binary_extensions: FrozenSet[str] = BINARY_EXTENSIONS,
        code_extensions: FrozenSet[str] = CODE_EXTENSIONS,
        skip_dirs: FrozenSet[str] = SKIP_DIRS,
        max_file_bytes: int = MAX_FILE_BYTES,
    ):
        self.binary_extensions = binary_extensions
        self.code_extensions = code_extensions
        self.skip_dirs = skip_dirs
        self.max_file_bytes = max_file_bytes

    def exclusion_reason(self, entry: FileEntry) -> Optional[str]:
        """
        Return why a file is excluded, or None if it is accepted.

        Exclusions are checked before the allow-list, so an oversized
        markdown file is still rejected by the size rule.
        """
        ext = entry.extension

        if ext in self.binary_extensions:
            return 'binary'

        if entry.size is not None and entry.size > self.max_file_bytes:
            return 'too_large'

        directories = PurePosixPath(entry.path).parts[:-1]
        if any(part in self.skip_dirs for part in directories):
            return 'skipped_dir'

        if ext in self.code_extensions or entry.name in ALWAYS_INCLUDE_NAMES:
            return None

        return 'unsupported_type'

    def should_include_file(self, entry: FileEntry) -> bool:
        """Determine if file should be included in ingestion."""
        return self.exclusion_reason(entry) is None

    def should_descend(self, entry: FileEntry) -> bool:
        """Directories whose files would all be rejected are not listed at all."""
        return not any(part in self.skip_dirs for part in PurePosixPath(entry.path).parts)


# Global instance
content_filter = ContentFilter()
