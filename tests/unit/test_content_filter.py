"""
Unit tests for ContentFilter: exclusion rules take precedence over the allow-list.

Run: pytest tests/unit/test_content_filter.py -v
"""
import sys
from pathlib import Path
from unittest import TestCase

REPO_ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(REPO_ROOT))

from repo_ingest.core.models import EntryType, FileEntry
from repo_ingest.services.content_filter import ContentFilter, content_filter


def make_file(path: str, size=100) -> FileEntry:
    return FileEntry(path=path, name=path.rsplit("/", 1)[-1], type=EntryType.FILE, size=size)


class TestContentFilterAllowList(TestCase):

    def test_accepts_source_and_text_extensions(self):
        for path in ["src/app.ts", "main.py", "lib/util.RS", "docs/notes.md", "scripts/run.sh", "data.json"]:
            with self.subTest(path=path):
                self.assertTrue(content_filter.should_include_file(make_file(path)))

    def test_accepts_readme_by_name(self):
        self.assertTrue(content_filter.should_include_file(make_file("README.md")))

    def test_rejects_unknown_extensions(self):
        for path in ["Makefile", "LICENSE", "Cargo.lock", "notes.rst"]:
            with self.subTest(path=path):
                self.assertFalse(content_filter.should_include_file(make_file(path)))
                self.assertEqual(content_filter.exclusion_reason(make_file(path)), "unsupported_type")


class TestContentFilterExclusions(TestCase):

    def test_binary_extension_rejected(self):
        for path in ["assets/logo.PNG", "bin/tool.exe", "release.tar", "lib/native.so"]:
            with self.subTest(path=path):
                self.assertEqual(content_filter.exclusion_reason(make_file(path)), "binary")

    def test_size_rule_beats_allow_list(self):
        huge_markdown = make_file("docs/guide.md", size=1024 * 1024 + 1)
        self.assertEqual(content_filter.exclusion_reason(huge_markdown), "too_large")

    def test_size_at_limit_is_accepted(self):
        self.assertTrue(content_filter.should_include_file(make_file("docs/guide.md", size=1024 * 1024)))

    def test_missing_size_skips_size_rule(self):
        self.assertTrue(content_filter.should_include_file(make_file("src/app.py", size=None)))

    def test_infrastructure_directories_rejected(self):
        for path in ["node_modules/pkg/index.js", "web/dist/bundle.js", "build/out.py",
                     ".next/server/page.js", "coverage/lcov.json", "a/b/.git/config.json"]:
            with self.subTest(path=path):
                self.assertEqual(content_filter.exclusion_reason(make_file(path)), "skipped_dir")

    def test_directory_names_match_whole_components_only(self):
        self.assertTrue(content_filter.should_include_file(make_file("src/distance.py")))
        self.assertTrue(content_filter.should_include_file(make_file("builder/main.go")))
        self.assertTrue(content_filter.should_include_file(make_file(".github/workflows/ci.yml")))
        self.assertTrue(content_filter.should_include_file(make_file("docs/rebuild/notes.md")))

    def test_binary_rule_applies_before_directory_rule(self):
        self.assertEqual(content_filter.exclusion_reason(make_file("dist/logo.png")), "binary")

    def test_is_pure_function_of_fields(self):
        entry = make_file("src/app.py")
        results = {content_filter.should_include_file(entry) for _ in range(5)}
        self.assertEqual(results, {True})
        self.assertTrue(ContentFilter().should_include_file(make_file("src/app.py")))


class TestShouldDescend(TestCase):

    def test_skipped_directories_are_not_descended(self):
        node_modules = FileEntry(path="web/node_modules", name="node_modules", type=EntryType.DIR)
        self.assertFalse(content_filter.should_descend(node_modules))

    def test_regular_directories_are_descended(self):
        src = FileEntry(path="src/build_tools", name="build_tools", type=EntryType.DIR)
        self.assertTrue(content_filter.should_descend(src))
