"""
Data Model for Repository Ingestion

Defines the structures that flow through one ingestion run: repository
coordinates, crawled file entries, code chunks, per-stage results and the
final outcome handed back to callers.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional

_COLLECTION_NAME_PATTERN = re.compile(r'[^a-z0-9_]')


class IngestionStage(Enum):
    """Linear stages of one ingestion run"""
    IDLE = "idle"
    CRAWLING = "crawling"
    CHUNKING = "chunking"
    EMBEDDING_STORING = "embedding_storing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class EntryType(Enum):
    """GitHub contents API item type"""
    FILE = "file"
    DIR = "dir"


@dataclass(frozen=True)
class RepositoryCoordinate:
    """Identifies a GitHub repository (and, deterministically, its collection)."""
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def collection_name(self) -> str:
        """Lower-cased `owner_name` with every char outside [a-z0-9_] mapped to `_`."""
        return _COLLECTION_NAME_PATTERN.sub('_', f"{self.owner}_{self.name}".lower())


@dataclass
class FileEntry:
    """One item of a repository listing."""
    path: str
    name: str
    type: EntryType
    size: Optional[int] = None
    download_url: Optional[str] = None

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> 'FileEntry':
        """Build from a GitHub contents API item. Unknown types are treated as files."""
        entry_type = EntryType.DIR if item.get('type') == 'dir' else EntryType.FILE
        return cls(
            path=item.get('path', ''),
            name=item.get('name', ''),
            type=entry_type,
            size=item.get('size'),
            download_url=item.get('download_url'),
        )

    @property
    def extension(self) -> str:
        """Lower-cased extension including the dot, '' when there is none."""
        return PurePosixPath(self.name).suffix.lower()

    @property
    def file_type(self) -> str:
        """Extension without the dot, or the whole name for extensionless files."""
        suffix = PurePosixPath(self.name).suffix
        return suffix[1:] if suffix else self.name


@dataclass
class CodeChunk:
    """A bounded, contiguous piece of one normalized file."""
    content: str
    file_path: str
    file_name: str
    file_type: str
    chunk_index: int  # 0-based, contiguous per file
    repository: str
    owner: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            'content': self.content,
            'file_path': self.file_path,
            'file_name': self.file_name,
            'file_type': self.file_type,
            'chunk_index': self.chunk_index,
            'repository': self.repository,
            'owner': self.owner,
        }


@dataclass
class CrawlResult:
    """Accepted files plus the listing paths that could not be read."""
    files: List[FileEntry] = field(default_factory=list)
    failed_paths: List[str] = field(default_factory=list)


@dataclass
class ChunkBuildResult:
    """Chunks produced from a file list, with per-file accounting."""
    chunks: List[CodeChunk] = field(default_factory=list)
    files_processed: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class BatchResult:
    """Outcome of embedding and storing one batch."""
    batch_id: int
    size: int
    stored: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class BatchRunResult:
    """Aggregate of all batches for one collection."""
    batches: List[BatchResult] = field(default_factory=list)

    @property
    def stored(self) -> int:
        return sum(b.stored for b in self.batches)

    @property
    def batches_succeeded(self) -> int:
        return sum(1 for b in self.batches if b.success)

    @property
    def batches_failed(self) -> int:
        return sum(1 for b in self.batches if not b.success)


@dataclass
class IngestionOutcome:
    """The only value returned to callers of the pipeline."""
    success: bool
    chunks_processed: int
    message: str
    stage: IngestionStage = IngestionStage.IDLE

    # Diagnostics
    files_found: int = 0
    files_skipped: int = 0
    chunks_stored: int = 0
    batches_succeeded: int = 0
    batches_failed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape consumed by the HTTP layer."""
        return {
            'success': self.success,
            'chunksProcessed': self.chunks_processed,
            'message': self.message,
        }
