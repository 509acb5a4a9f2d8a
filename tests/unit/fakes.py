"""
In-memory stand-ins for the external services used by the pipeline.

FakeGitHub serves a repository tree through httpx.MockTransport;
FakeEmbeddingService returns deterministic unit vectors.
"""
from typing import Any, Dict, Iterable, List, Optional, Set

import httpx

from repo_ingest.core.errors import EmbeddingError
from repo_ingest.core.models import RepositoryCoordinate
from repo_ingest.services.github_client import GitHubRepositoryClient

RAW_BASE = "https://raw.example.test/raw"


class FakeGitHub:
    """
    GitHub contents API for a fixed set of files.

    Downloads are served as text/plain like raw.githubusercontent.com does,
    except for paths in json_files which get application/json. raw_listings
    replaces the listing payload of a directory verbatim.
    """

    def __init__(
        self,
        owner: str,
        name: str,
        files: Dict[str, str],
        sizes: Optional[Dict[str, int]] = None,
        failing_dirs: Iterable[str] = (),
        failing_downloads: Iterable[str] = (),
        json_files: Iterable[str] = (),
        page_size: Optional[int] = None,
        raw_listings: Optional[Dict[str, Any]] = None,
    ):
        self.owner = owner
        self.name = name
        self.files = files
        self.sizes = sizes or {}
        self.failing_dirs: Set[str] = set(failing_dirs)
        self.failing_downloads: Set[str] = set(failing_downloads)
        self.json_files: Set[str] = set(json_files)
        self.page_size = page_size
        self.raw_listings = raw_listings or {}
        self.requests: List[httpx.Request] = []

    @property
    def coordinate(self) -> RepositoryCoordinate:
        return RepositoryCoordinate(owner=self.owner, name=self.name)

    def _children(self, dir_path: str) -> List[dict]:
        prefix = f"{dir_path}/" if dir_path else ""
        dirs, files = set(), []
        for path in self.files:
            if not path.startswith(prefix):
                continue
            rest = path[len(prefix):]
            if "/" in rest:
                dirs.add(rest.split("/", 1)[0])
            else:
                files.append(rest)

        items = []
        for entry in sorted(dirs | set(files)):
            full_path = f"{prefix}{entry}"
            if entry in dirs:
                items.append({"name": entry, "path": full_path, "type": "dir", "size": 0, "download_url": None})
            else:
                items.append({
                    "name": entry,
                    "path": full_path,
                    "type": "file",
                    "size": self.sizes.get(full_path, len(self.files[full_path].encode("utf-8"))),
                    "download_url": f"{RAW_BASE}/{full_path}",
                })
        return items

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        contents_prefix = f"/repos/{self.owner}/{self.name}/contents"

        if path.startswith(contents_prefix):
            dir_path = path[len(contents_prefix):].strip("/")
            if dir_path in self.failing_dirs:
                return httpx.Response(500, json={"message": "Server Error"})
            if dir_path in self.raw_listings:
                return httpx.Response(200, json=self.raw_listings[dir_path])
            items = self._children(dir_path)
            if self.page_size is None:
                return httpx.Response(200, json=items)

            page = int(request.url.params.get("page", "1"))
            start = (page - 1) * self.page_size
            headers = {}
            if start + self.page_size < len(items):
                next_url = request.url.copy_set_param("page", str(page + 1))
                headers["Link"] = f'<{next_url}>; rel="next"'
            return httpx.Response(200, json=items[start:start + self.page_size], headers=headers)

        if request.url.host == "raw.example.test":
            file_path = path[len("/raw/"):]
            if file_path in self.failing_downloads:
                return httpx.Response(502, text="Bad Gateway")
            if file_path in self.json_files:
                return httpx.Response(200, content=self.files[file_path].encode("utf-8"),
                                      headers={"content-type": "application/json"})
            return httpx.Response(200, text=self.files[file_path])

        return httpx.Response(404, json={"message": "Not Found"})

    def client_factory(self, coordinate: RepositoryCoordinate, access_token: str) -> GitHubRepositoryClient:
        """Drop-in for IngestionPipeline's repository_client_factory."""
        return GitHubRepositoryClient(
            coordinate,
            access_token,
            http_client=httpx.Client(transport=httpx.MockTransport(self.handler)),
        )


class FakeEmbeddingService:
    """Returns unit vectors; fails the calls whose 1-based number is in fail_calls."""

    def __init__(self, embedding_size: int = 384, fail_calls: Iterable[int] = (), fail_always: bool = False):
        self.embedding_size = embedding_size
        self.fail_calls = set(fail_calls)
        self.fail_always = fail_always
        self.calls: List[List[str]] = []
        self.warmups = 0

    def warmup(self):
        self.warmups += 1

    def embed(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        if self.fail_always or len(self.calls) in self.fail_calls:
            raise EmbeddingError("simulated embedding outage")
        vectors = []
        for i, _ in enumerate(texts):
            vector = [0.0] * self.embedding_size
            vector[i % self.embedding_size] = 1.0
            vectors.append(vector)
        return vectors
