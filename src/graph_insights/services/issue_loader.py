"""Turn raw issue records into validated Issue models."""
from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from src.shared.models.issues import Issue

logger = logging.getLogger(__name__)


def parse_issue_records(records: Iterable[Any]) -> list[Issue]:
    """Validate a sequence of raw issue records.

    Records may be mappings or already-built :class:`Issue` instances.
    A record without a usable ``id`` is skipped, as is any record that
    fails validation; the remainder of the batch is still returned.
    """
    issues: list[Issue] = []
    for index, record in enumerate(records):
        if isinstance(record, Issue):
            issues.append(record)
            continue
        if not isinstance(record, Mapping):
            logger.warning("Skipping issue record %d: not a mapping", index)
            continue
        issue_id = record.get("id")
        if not isinstance(issue_id, str) or not issue_id:
            logger.warning("Skipping issue record %d: missing id", index)
            continue
        try:
            issues.append(Issue.model_validate(dict(record)))
        except ValidationError as exc:
            logger.warning(
                "Skipping issue %s: %d invalid field(s)", issue_id, exc.error_count()
            )
    return issues


def parse_issues_jsonl(content: str) -> list[Issue]:
    """Parse JSONL text (one issue object per line).

    Blank lines and lines that are not valid JSON are skipped.
    """
    records: list[Any] = []
    for line_no, line in enumerate(content.splitlines(), start=1):
        stripped = line.strip()
        if not stripped:
            continue
        try:
            records.append(json.loads(stripped))
        except json.JSONDecodeError as exc:
            logger.warning("Skipping malformed JSONL line %d: %s", line_no, exc.msg)
    return parse_issue_records(records)
