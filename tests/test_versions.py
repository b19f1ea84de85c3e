"""
Tests for the Version History.
"""

import pytest

from covenant.contracts import create_registry
from covenant.core import (
    AccessLevel,
    EventType,
    InvalidInputError,
    InvalidStateError,
    LedgerConfig,
    NotAuthorizedError,
    NotFoundError,
    VersionNotFoundError,
)


class TestRecordVersion:
    """Tests for VersionHistory.record_version."""

    def test_numbers_are_gapless(self, registry, nda, clock, content_hash):
        first = registry.record_version(clock.as_caller("alice"), nda, content_hash("v1"), "Clause 4 edited")
        second = registry.record_version(clock.as_caller("alice"), nda, content_hash("v2"), "Signatory block")

        assert (first, second) == (1, 2)
        assert registry.latest_version(nda) == 2
        numbers = [v.version_number for v in registry.versions.list_versions(nda)]
        assert numbers == [0, 1, 2]

    def test_numbering_is_per_contract(self, registry, nda, clock, content_hash):
        other = registry.create_contract(clock.as_caller("bob"), "MSA", "Services", 1, content_hash("msa"))
        registry.record_version(clock.as_caller("alice"), nda, content_hash("v1"), "Edit")

        assert registry.latest_version(nda) == 1
        assert registry.latest_version(other) == 0
        assert registry.record_version(clock.as_caller("bob"), other, content_hash("m1"), "Edit") == 1

    def test_version_row_contents(self, registry, nda, clock, content_hash):
        ctx = clock.as_caller("alice")
        registry.record_version(ctx, nda, content_hash("v1"), "Clause 4 edited")

        version = registry.versions.get_version(nda, 1)
        assert version.content_hash == content_hash("v1")
        assert version.author == "alice"
        assert version.created_at == ctx.timestamp
        assert version.metadata == "Clause 4 edited"

    def test_updates_contract_timestamp(self, registry, nda, clock, content_hash):
        ctx = clock.as_caller("alice")
        registry.record_version(ctx, nda, content_hash("v1"), "Edit")
        assert registry.get_contract_details(nda).updated_at == ctx.timestamp

    def test_event_carries_version_number(self, registry, nda, clock, content_hash):
        registry.record_version(clock.as_caller("alice"), nda, content_hash("v1"), "Edit")

        event = registry.events.events_for(nda, EventType.VERSION_RECORDED)[0]
        assert event.related_value == 1
        assert event.created_by == "alice"
        assert event.metadata == "Edit"

    def test_writer_may_record(self, registry, nda, clock, content_hash):
        registry.grant_access(clock.as_caller("alice"), nda, "bob", AccessLevel.WRITE)
        assert registry.record_version(clock.as_caller("bob"), nda, content_hash("v1"), "Edit") == 1

    def test_reader_may_not_record(self, registry, nda, clock, content_hash):
        registry.grant_access(clock.as_caller("alice"), nda, "bob", AccessLevel.READ)
        with pytest.raises(NotAuthorizedError):
            registry.record_version(clock.as_caller("bob"), nda, content_hash("v1"), "Edit")

    def test_stranger_may_not_record(self, registry, nda, clock, content_hash):
        with pytest.raises(NotAuthorizedError) as exc_info:
            registry.record_version(clock.as_caller("mallory"), nda, content_hash("v1"), "Edit")
        assert exc_info.value.principal == "mallory"
        assert exc_info.value.required == "WRITE"
        assert registry.latest_version(nda) == 0

    def test_bad_hash_rejected(self, registry, nda, clock):
        with pytest.raises(InvalidInputError):
            registry.record_version(clock.as_caller("alice"), nda, b"\x00" * 16, "Edit")

    def test_empty_metadata_rejected(self, registry, nda, clock, content_hash):
        with pytest.raises(InvalidInputError):
            registry.record_version(clock.as_caller("alice"), nda, content_hash("v1"), "")

    def test_metadata_length_bounded(self, clock, content_hash):
        registry = create_registry(LedgerConfig(max_metadata_length=10))
        try:
            contract_id = registry.create_contract(clock.as_caller("alice"), "NDA", "Terms", 1, content_hash())
            with pytest.raises(InvalidInputError):
                registry.record_version(clock.as_caller("alice"), contract_id, content_hash("v1"), "x" * 11)
        finally:
            registry.close()

    def test_archived_contract_rejects_versions(self, registry, nda, clock, content_hash):
        registry.archive_contract(clock.as_caller("alice"), nda)
        with pytest.raises(InvalidStateError):
            registry.record_version(clock.as_caller("alice"), nda, content_hash("v1"), "Edit")

    def test_unknown_contract(self, registry, clock, content_hash):
        with pytest.raises(NotFoundError):
            registry.record_version(clock.as_caller("alice"), 5, content_hash("v1"), "Edit")


class TestVersionQueries:
    """Tests for version lookups."""

    def test_latest_of_unknown_contract_is_not_found(self, registry):
        with pytest.raises(NotFoundError) as exc_info:
            registry.latest_version(3)
        assert not isinstance(exc_info.value, VersionNotFoundError)

    def test_latest_without_versions_is_consistency_error(self, registry, nda):
        registry.database.execute("DELETE FROM versions WHERE contract_id = ?", (nda,))
        with pytest.raises(VersionNotFoundError):
            registry.latest_version(nda)

    def test_missing_version_number(self, registry, nda):
        with pytest.raises(VersionNotFoundError) as exc_info:
            registry.versions.get_version(nda, 99)
        assert exc_info.value.version == 99

    def test_version_to_dict(self, registry, nda, content_hash):
        data = registry.versions.get_version(nda, 0).to_dict()
        assert data["content_hash"] == content_hash("nda-v0").hex()
        assert data["metadata"] == "Initial version"
