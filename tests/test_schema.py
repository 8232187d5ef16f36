# =============================================================================
# tests/test_schema.py - Migration Consistency Tests
# =============================================================================
# The database triggers and the service layer enforce the same caps. These
# tests read the migration so the two cannot drift apart silently.
# =============================================================================

import re
from pathlib import Path

import pytest

from app.config import MAX_DOCUMENTS_PER_REQUEST, MAX_PHOTOS_PER_BUSINESS

MIGRATION = Path(__file__).resolve().parent.parent / "supabase" / "migrations" / "0001_lokolo_core.sql"


@pytest.fixture(scope="module")
def migration_sql():
    return MIGRATION.read_text(encoding="utf-8")


def trigger_body(sql: str, function: str) -> str:
    match = re.search(
        rf"create or replace function {function}\(\).*?\$\$(.*?)\$\$",
        sql,
        re.DOTALL,
    )
    assert match, f"{function} not found in migration"
    return match.group(1)


def count_threshold(body: str) -> int:
    match = re.search(r"\)\s*>=\s*(\d+)\s+then", body)
    assert match, "no count threshold in trigger body"
    return int(match.group(1))


class TestTriggerCaps:
    def test_photo_limit_matches_constant(self, migration_sql):
        body = trigger_body(migration_sql, "enforce_photo_limit")

        assert "PHOTO_LIMIT_EXCEEDED" in body
        assert count_threshold(body) == MAX_PHOTOS_PER_BUSINESS

    def test_document_limit_matches_constant(self, migration_sql):
        body = trigger_body(migration_sql, "enforce_document_rules")

        assert "DOCUMENT_LIMIT_EXCEEDED" in body
        assert count_threshold(body) == MAX_DOCUMENTS_PER_REQUEST


class TestUniqueConstraints:
    def test_logo_index_name(self, migration_sql):
        # The store maps unique violations on this index to LogoAlreadyExistsError
        assert "create unique index business_media_one_logo" in migration_sql

    def test_pending_request_index_name(self, migration_sql):
        assert "create unique index verification_requests_one_pending" in migration_sql
