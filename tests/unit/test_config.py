"""
Unit tests for IngestionConfig and YAML overrides.

Run: pytest tests/unit/test_config.py -v
"""
import os
import sys
import tempfile
from pathlib import Path
from unittest import TestCase
from unittest.mock import patch

REPO_ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(REPO_ROOT))

from repo_ingest.core.config import IngestionConfig, load_ingestion_config


class TestIngestionConfig(TestCase):

    def test_defaults(self):
        config = IngestionConfig(embedding_backend="remote")
        self.assertEqual(config.chunk_size, 1000)
        self.assertEqual(config.chunk_overlap, 200)
        self.assertEqual(config.embedding_size, 384)
        self.assertEqual(config.distance, "cosine")
        self.assertEqual(config.batch_size, 5)

    def test_backend_from_environment(self):
        with patch.dict(os.environ, {"EMBEDDING_BACKEND": "LOCAL"}):
            self.assertEqual(IngestionConfig().embedding_backend, "local")

    def test_overlap_must_be_smaller_than_size(self):
        with self.assertRaises(ValueError):
            IngestionConfig(chunk_size=100, chunk_overlap=100)

    def test_batch_size_must_be_positive(self):
        with self.assertRaises(ValueError):
            IngestionConfig(batch_size=0)


class TestLoadIngestionConfig(TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, text: str) -> Path:
        path = Path(self.tmp.name) / "ingestion.yaml"
        path.write_text(text)
        return path

    def test_missing_file_gives_defaults(self):
        config = load_ingestion_config(Path(self.tmp.name) / "absent.yaml")
        self.assertEqual(config.chunk_size, 1000)

    def test_nested_overrides(self):
        path = self.write("ingestion:\n  batch_size: 10\n  embedding_backend: remote\n")
        config = load_ingestion_config(path)
        self.assertEqual(config.batch_size, 10)
        self.assertEqual(config.chunk_size, 1000)

    def test_top_level_overrides(self):
        path = self.write("chunk_size: 500\nchunk_overlap: 50\n")
        config = load_ingestion_config(path)
        self.assertEqual((config.chunk_size, config.chunk_overlap), (500, 50))

    def test_unknown_keys_rejected(self):
        path = self.write("ingestion:\n  chunk_sise: 500\n")
        with self.assertRaises(ValueError) as ctx:
            load_ingestion_config(path)
        self.assertIn("chunk_sise", str(ctx.exception))

    def test_non_mapping_rejected(self):
        path = self.write("- just\n- a list\n")
        with self.assertRaises(ValueError):
            load_ingestion_config(path)

    def test_env_variable_selects_file(self):
        path = self.write("ingestion:\n  qdrant_timeout: 5\n")
        with patch.dict(os.environ, {"INGESTION_CONFIG": str(path)}):
            self.assertEqual(load_ingestion_config().qdrant_timeout, 5)

    def test_bundled_example_keeps_defaults(self):
        config = load_ingestion_config(REPO_ROOT / "config" / "ingestion.yaml")
        self.assertEqual(config.chunk_size, 1000)
        self.assertEqual(config.batch_size, 5)
