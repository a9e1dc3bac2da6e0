"""
test_relation_manager.py
------------------------
Unit tests for RelationManager.

Covers lookup by host address, insert/update/upsert, idempotent deletes,
best-effort bulk deletes and distinct-entity counting.
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import patch

from entrel.core.exceptions import NotFoundError, StorageError
from entrel.database.managers import BulkDeleteResult
from entrel.database.models import EntityRelation, HostAddress


OPTION_42 = HostAddress("mod_booking", "option", 42)


class TestFindByAddress:

    def test_missing_returns_none(self, relation_manager):
        assert relation_manager.find_by_address(OPTION_42) is None
        assert relation_manager.get_entity_id_for_address(OPTION_42) is None

    def test_found(self, relation_manager, make_entities):
        make_entities(5)
        relation_id = relation_manager.insert(OPTION_42, 5)

        relation = relation_manager.find_by_address(OPTION_42)
        assert relation.id == relation_id
        assert relation.address == OPTION_42
        assert relation_manager.get_entity_id_for_address(OPTION_42) == 5

    def test_address_parts_all_matter(self, relation_manager, make_entities):
        make_entities(5)
        relation_manager.insert(OPTION_42, 5)

        assert relation_manager.find_by_address(HostAddress("mod_booking", "optiondate", 42)) is None
        assert relation_manager.find_by_address(HostAddress("mod_event", "option", 42)) is None
        assert relation_manager.find_by_address(HostAddress("mod_booking", "option", 43)) is None


class TestInsertAndUpdate:

    def test_insert_uses_given_timestamp(self, relation_manager, make_entities):
        make_entities(5)
        stamp = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

        relation_id = relation_manager.insert(OPTION_42, 5, stamp)

        assert relation_manager.get(relation_id).timecreated == stamp

    def test_duplicate_insert_rejected(self, relation_manager, make_entities):
        make_entities(5)
        relation_manager.insert(OPTION_42, 5)

        with pytest.raises(StorageError):
            relation_manager.insert(OPTION_42, 5)

    def test_update_keeps_id(self, relation_manager, make_entities):
        make_entities(5, 9)
        relation_id = relation_manager.insert(OPTION_42, 5)

        relation_manager.update(relation_id, 9)

        relation = relation_manager.find_by_address(OPTION_42)
        assert relation.id == relation_id
        assert relation.entityid == 9

    def test_update_missing_raises(self, relation_manager):
        with pytest.raises(NotFoundError):
            relation_manager.update(999, 5)


class TestUpsert:

    def test_creates_when_missing(self, relation_manager, make_entities, db_session):
        make_entities(5)

        relation = relation_manager.upsert(OPTION_42, 5)

        assert relation.id is not None
        assert db_session.query(EntityRelation).count() == 1

    def test_updates_in_place(self, relation_manager, make_entities, db_session):
        make_entities(5, 9)
        first = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
        second = datetime(2024, 1, 15, 11, 0, tzinfo=timezone.utc)

        created = relation_manager.upsert(OPTION_42, 5, first)
        updated = relation_manager.upsert(OPTION_42, 9, second)

        assert updated.id == created.id
        assert updated.entityid == 9
        assert updated.timecreated == second
        assert db_session.query(EntityRelation).count() == 1

    def test_lost_race_updates_winner(self, relation_manager, make_entities, db_session):
        """A row appearing between the read and the insert is updated instead."""
        make_entities(5, 9)
        winner_id = relation_manager.insert(OPTION_42, 5)
        real_query = relation_manager._query_address
        calls = {"n": 0}

        def stale_first_read(address):
            calls["n"] += 1
            query = real_query(address)
            if calls["n"] == 1:
                return query.filter(EntityRelation.id == -1)
            return query

        with patch.object(relation_manager, "_query_address", side_effect=stale_first_read):
            relation = relation_manager.upsert(OPTION_42, 9)

        assert relation.id == winner_id
        assert relation.entityid == 9
        assert db_session.query(EntityRelation).count() == 1

    def test_unknown_entity_rejected(self, relation_manager):
        with pytest.raises(StorageError):
            relation_manager.upsert(OPTION_42, 12345)


class TestDelete:

    def test_delete_existing(self, relation_manager, make_entities):
        make_entities(5)
        relation_manager.insert(OPTION_42, 5)

        assert relation_manager.delete_by_address(OPTION_42) is True
        assert relation_manager.find_by_address(OPTION_42) is None

    def test_delete_is_idempotent(self, relation_manager):
        assert relation_manager.delete_by_address(OPTION_42) is False
        assert relation_manager.delete_by_address(OPTION_42) is False


class TestDeleteByAddresses:

    def test_deletes_each_host(self, relation_manager, make_entities):
        make_entities(5)
        for instanceid in (10, 11, 12):
            relation_manager.insert(HostAddress("mod_booking", "option", instanceid), 5)

        result = relation_manager.delete_by_addresses("mod_booking", "option", {10, 11, 12, 13})

        assert result.deleted == 3
        assert result.success
        assert relation_manager.count_distinct_entities("mod_booking", "option", [10, 11, 12]) == 0

    def test_failures_collected_and_rest_processed(self, relation_manager, make_entities):
        make_entities(5)
        for instanceid in (10, 11, 12):
            relation_manager.insert(HostAddress("mod_booking", "option", instanceid), 5)
        real_delete = relation_manager.delete_by_address

        def failing_delete(address):
            if address.instanceid == 11:
                raise StorageError("database is locked")
            return real_delete(address)

        with patch.object(relation_manager, "delete_by_address", side_effect=failing_delete):
            result = relation_manager.delete_by_addresses("mod_booking", "option", [10, 11, 12])

        assert result.deleted == 2
        assert result.failed_ids == [11]
        assert not result.success
        assert not result
        assert relation_manager.get_entity_id_for_address(HostAddress("mod_booking", "option", 11)) == 5

    def test_empty_input(self, relation_manager):
        result = relation_manager.delete_by_addresses("mod_booking", "option", [])
        assert result == BulkDeleteResult()
        assert result


class TestBulkDeleteResult:

    def test_truthiness_follows_success(self):
        assert BulkDeleteResult(2)
        assert not BulkDeleteResult(2, [4])
        assert not BulkDeleteResult(0, [4]).success


class TestCountDistinctEntities:

    def test_counts_distinct(self, relation_manager, make_entities):
        make_entities(5, 7)
        relation_manager.insert(HostAddress("mod_booking", "optiondate", 1), 5)
        relation_manager.insert(HostAddress("mod_booking", "optiondate", 2), 5)
        relation_manager.insert(HostAddress("mod_booking", "optiondate", 3), 7)

        assert relation_manager.count_distinct_entities("mod_booking", "optiondate", [1, 2, 3]) == 2
        assert relation_manager.count_distinct_entities("mod_booking", "optiondate", [1, 2]) == 1

    def test_ignores_other_areas(self, relation_manager, make_entities):
        make_entities(5, 7)
        relation_manager.insert(HostAddress("mod_booking", "optiondate", 1), 5)
        relation_manager.insert(HostAddress("mod_booking", "option", 2), 7)

        assert relation_manager.count_distinct_entities("mod_booking", "optiondate", [1, 2]) == 1

    def test_empty_ids(self, relation_manager):
        assert relation_manager.count_distinct_entities("mod_booking", "optiondate", []) == 0


class TestGetRelationsForEntity:

    def test_ordered_by_address(self, relation_manager, make_entities):
        make_entities(5)
        relation_manager.insert(HostAddress("mod_booking", "optiondate", 3), 5)
        relation_manager.insert(HostAddress("mod_booking", "option", 9), 5)
        relation_manager.insert(HostAddress("mod_booking", "option", 2), 5)

        addresses = [str(r.address) for r in relation_manager.get_relations_for_entity(5)]

        assert addresses == [
            "mod_booking/option/2",
            "mod_booking/option/9",
            "mod_booking/optiondate/3",
        ]
