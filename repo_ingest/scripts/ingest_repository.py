#!/usr/bin/env python3
"""
Repository ingestion script.

Crawls a GitHub repository, embeds its code chunks and stores them in the
repository's Qdrant collection (owner_name), replacing any previous index.

Usage:
    python -m repo_ingest.scripts.ingest_repository octocat hello-world
    GITHUB_TOKEN=... repo-ingest octocat hello-world --json
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from repo_ingest.core.config import load_ingestion_config
from repo_ingest.core.models import RepositoryCoordinate
from repo_ingest.core.pipeline import IngestionPipeline
from repo_ingest.core.responses import error_response, outcome_to_response

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(
        description='Ingest a GitHub repository into a Qdrant collection'
    )
    parser.add_argument('owner', help='Repository owner (user or organization)')
    parser.add_argument('name', help='Repository name')
    parser.add_argument(
        '--token',
        default=None,
        help='GitHub access token (default: GITHUB_TOKEN environment variable)'
    )
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='Path to ingestion.yaml (default: INGESTION_CONFIG or config/ingestion.yaml)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the response body as JSON'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    token = args.token or os.getenv('GITHUB_TOKEN')
    if not token:
        logger.error("GitHub access token is required (--token or GITHUB_TOKEN)")
        return 2

    coordinate = RepositoryCoordinate(owner=args.owner, name=args.name)

    try:
        config = load_ingestion_config(args.config)
        pipeline = IngestionPipeline(config=config)
        outcome = pipeline.process_repository(coordinate, token)
        body, status = outcome_to_response(outcome, coordinate)
    except Exception as e:
        logger.error(f"Controller error: {e}")
        body, status = error_response(e)

    if args.json:
        print(json.dumps(body, indent=2))
    else:
        print(body['message'])

    return 0 if status == 200 else 1


if __name__ == '__main__':
    sys.exit(main())
