"""
HTTP response mapping for ingestion outcomes.

Route layers call these to turn an IngestionOutcome (or an unexpected
exception) into a JSON body and status code.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from .models import IngestionOutcome, RepositoryCoordinate


def outcome_to_response(outcome: IngestionOutcome, coordinate: RepositoryCoordinate) -> Tuple[Dict[str, Any], int]:
    """
    Return (JSON body, status_code) for a finished run.

    200 with the repository and completion time on success, 400 otherwise.
    """
    if not outcome.success:
        return {'success': False, 'message': outcome.message}, 400

    body = outcome.to_dict()
    body['repository'] = coordinate.full_name
    body['processedAt'] = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
    return body, 200


def error_response(error: Exception) -> Tuple[Dict[str, Any], int]:
    """Return (JSON body, 500) for an exception that escaped the pipeline."""
    return {'success': False, 'message': f"Internal server error: {error}"}, 500
