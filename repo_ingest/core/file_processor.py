"""
File Processor for Chunk Building

Fetches accepted files, normalizes their content and splits it into
CodeChunks. Single responsibility: turning files into chunks.
"""

import logging
import re
from typing import List

from .config import IngestionConfig
from .models import ChunkBuildResult, CodeChunk, FileEntry, RepositoryCoordinate
from ..parsers.text_splitter import RecursiveTextSplitter

logger = logging.getLogger(__name__)

BLOCK_COMMENT_PATTERN = re.compile(r'/\*[\s\S]*?\*/')
LINE_COMMENT_PATTERN = re.compile(r'//.*$', re.MULTILINE)
WHITESPACE_PATTERN = re.compile(r'\s+')


def normalize_content(content: str, file_path: str) -> str:
    """
    Strip comments, collapse whitespace and prepend a file header.

    Returns "" when nothing but comments and whitespace remain.
    """
    body = BLOCK_COMMENT_PATTERN.sub('', content)
    body = LINE_COMMENT_PATTERN.sub('', body)
    body = WHITESPACE_PATTERN.sub(' ', body).strip()
    if not body:
        return ""
    return f"File: {file_path}\n\n{body}"


class FileProcessor:
    """
    Builds chunks for one repository.

    Responsibilities:
    - Fetch content through the repository client
    - Skip empty and oversized content
    - Normalize and split content into indexed chunks
    - Keep a failing file from aborting the rest
    """

    def __init__(self, repository_client, coordinate: RepositoryCoordinate, config: IngestionConfig):
        """
        Args:
            repository_client: Object with fetch_content(FileEntry) -> str
            coordinate: Repository the files belong to
            config: IngestionConfig instance
        """
        self.repository_client = repository_client
        self.coordinate = coordinate
        self.config = config
        self.splitter = RecursiveTextSplitter(
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap
        )

    def build_chunks(self, files: List[FileEntry]) -> ChunkBuildResult:
        """
        Produce chunks for every file, in file order.

        Args:
            files: Accepted file entries from the crawl

        Returns:
            ChunkBuildResult with chunks and per-file counters
        """
        result = ChunkBuildResult()

        for entry in files:
            try:
                logger.debug(f"📄 Processing file: {entry.path}")
                chunks = self._process_file(entry)
            except Exception as e:
                logger.error(f"❌ Error processing file {entry.path}: {e}")
                result.files_failed += 1
                result.errors.append(f"{entry.path}: {e}")
                continue

            if not chunks:
                result.files_skipped += 1
                continue

            result.chunks.extend(chunks)
            result.files_processed += 1
            logger.info(f"✅ Processed {entry.path}: {len(chunks)} chunks")

        logger.info(
            f"📊 Generated {len(result.chunks)} chunks from {result.files_processed} files "
            f"({result.files_skipped} skipped, {result.files_failed} failed)"
        )
        return result

    def _process_file(self, entry: FileEntry) -> List[CodeChunk]:
        content = self.repository_client.fetch_content(entry)
        if not content:
            logger.info(f"⏭️  Skipping empty file: {entry.path}")
            return []

        if len(content) > self.config.max_content_chars:
            logger.warning(f"⚠️ Skipping large file: {entry.path} ({len(content):,} chars)")
            return []

        normalized = normalize_content(content, entry.path)
        if not normalized:
            logger.info(f"⏭️  Skipping comment-only file: {entry.path}")
            return []

        return [
            CodeChunk(
                content=text,
                file_path=entry.path,
                file_name=entry.name,
                file_type=entry.file_type,
                chunk_index=index,
                repository=self.coordinate.name,
                owner=self.coordinate.owner,
            )
            for index, text in enumerate(self.splitter.split_text(normalized))
        ]
