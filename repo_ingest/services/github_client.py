"""
GitHub Repository Client

Crawls a repository tree through the GitHub contents API and downloads the
raw content of accepted files. Listing and download failures are logged and
degrade to empty results for the affected node; nothing is retried here.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.models import CrawlResult, EntryType, FileEntry, RepositoryCoordinate
from .content_filter import ContentFilter, content_filter as default_content_filter

logger = logging.getLogger(__name__)


class GitHubRepositoryClient:
    """
    Reads one repository with a caller-supplied bearer token.

    The token is sent as an Authorization header and never logged.
    """

    def __init__(
        self,
        coordinate: RepositoryCoordinate,
        access_token: str,
        api_url: str = "https://api.github.com",
        user_agent: str = "repo-ingest",
        timeout: float = 30.0,
        content_filter: Optional[ContentFilter] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            coordinate: Repository to read
            access_token: Bearer token authorizing repository reads
            api_url: GitHub API base URL
            user_agent: User-Agent header (required by the GitHub API)
            timeout: Per-request timeout in seconds
            content_filter: File filter (defaults to the shared instance)
            http_client: Optional preconfigured httpx.Client (tests inject a MockTransport)
        """
        self.coordinate = coordinate
        self.api_base = f"{api_url.rstrip('/')}/repos/{coordinate.owner}/{coordinate.name}"
        self.content_filter = content_filter or default_content_filter

        self.headers = {
            "Accept": "application/vnd.github.v3+json",
            "Authorization": f"Bearer {access_token}",
            "User-Agent": user_agent,
        }
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self):
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> 'GitHubRepositoryClient':
        return self

    def __exit__(self, *exc_info):
        self.close()

    def list_directory(self, path: str = "") -> List[Dict[str, Any]]:
        """
        List one directory, following Link rel="next" pages.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
            ValueError: If the payload is not a directory listing or an item
                lacks a path or type
        """
        url: Optional[str] = f"{self.api_base}/contents/{path}"
        items: List[Dict[str, Any]] = []

        while url:
            response = self.client.get(url, headers=self.headers)
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, list):
                raise ValueError(f"expected a directory listing for '{path or '/'}'")
            for item in data:
                if not isinstance(item, dict) or not item.get('path') or 'type' not in item:
                    raise ValueError(f"malformed listing item in '{path or '/'}': {item!r:.80}")
            items.extend(data)
            url = response.links.get("next", {}).get("url")

        return items

    def crawl(self) -> CrawlResult:
        """
        Depth-first walk from the repository root, keeping accepted files.

        Uses an explicit stack of pending entries so files come out in the
        same pre-order a recursive listing would produce.
        """
        result = CrawlResult()
        stack: List[FileEntry] = [FileEntry(path="", name="", type=EntryType.DIR)]

        while stack:
            entry = stack.pop()

            if entry.type is EntryType.FILE:
                if self.content_filter.should_include_file(entry):
                    result.files.append(entry)
                else:
                    logger.debug(f"⏭️  Skipping excluded file: {entry.path}")
                continue

            try:
                items = self.list_directory(entry.path)
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"❌ Error fetching contents for path '{entry.path or '/'}': {e}")
                result.failed_paths.append(entry.path)
                continue

            children = []
            for item in items:
                child = FileEntry.from_api(item)
                if child.type is EntryType.DIR and not self.content_filter.should_descend(child):
                    logger.debug(f"⏭️  Skipping directory: {child.path}")
                    continue
                children.append(child)
            stack.extend(reversed(children))

        logger.info(
            f"📂 Crawled {self.coordinate.full_name}: {len(result.files)} files accepted"
            + (f", {len(result.failed_paths)} listings failed" if result.failed_paths else "")
        )
        return result

    def fetch_content(self, entry: FileEntry) -> str:
        """
        Download a file's raw content as text.

        JSON payloads are re-serialized with 2-space indentation. Returns ""
        when there is no download URL or the download fails.
        """
        if not entry.download_url:
            return ""

        try:
            response = self.client.get(
                entry.download_url,
                headers={"Authorization": self.headers["Authorization"], "User-Agent": self.headers["User-Agent"]},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"❌ Error fetching content for {entry.path}: {e}")
            return ""

        # raw.githubusercontent.com serves .json files as text/plain
        content_type = response.headers.get("content-type", "")
        if entry.extension == ".json" or "json" in content_type:
            try:
                return json.dumps(json.loads(response.text), indent=2)
            except ValueError:
                logger.debug(f"⏭️  {entry.path} is not valid JSON, keeping raw text")

        return response.text
