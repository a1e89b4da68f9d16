"""Tests for the daily stale-location purge."""
import logging
from datetime import timedelta
from unittest import mock

from apps.locations import tasks
from apps.locations.services.cleanup import purge_stale_locations
from common.store import StoreError


def _put_location(store, user_id, updated_at):
    store.set('locations', user_id, {
        'user_id': user_id,
        'latitude': 1.0,
        'longitude': 2.0,
        'updated_at': updated_at,
    })


def test_retention_boundary(store, clock):
    _put_location(store, 'fresh', clock.now - timedelta(hours=23, minutes=59))
    _put_location(store, 'stale', clock.now - timedelta(hours=24, minutes=1))

    deleted = purge_stale_locations(store=store, now=clock.now)

    assert deleted == 1
    assert store.get('locations', 'fresh').exists
    assert not store.get('locations', 'stale').exists


def test_purges_regardless_of_sharing_flag(store, users, clock, alice):
    users.set_location_sharing_enabled(alice.id, True)
    _put_location(store, alice.id, clock.now - timedelta(days=2))

    assert purge_stale_locations(store=store, now=clock.now) == 1


def test_large_purge_is_split_into_batches(store, clock):
    old = clock.now - timedelta(days=3)
    for index in range(501):
        _put_location(store, f'user-{index}', old)

    with mock.patch.object(store, 'commit_batch', wraps=store.commit_batch) as commit:
        deleted = purge_stale_locations(store=store, now=clock.now)

    assert deleted == 501
    assert commit.call_count == 2
    assert store.collection('locations').get() == []


def test_nothing_to_purge(store, clock, caplog):
    caplog.set_level(logging.INFO)
    assert purge_stale_locations(store=store, now=clock.now) == 0
    assert 'Cleaned up 0 old location records' in caplog.text


def test_store_failure_is_logged_and_not_raised(store, clock, caplog):
    caplog.set_level(logging.ERROR)
    _put_location(store, 'stale', clock.now - timedelta(days=1, minutes=1))

    with mock.patch.object(store, 'commit_batch', side_effect=StoreError('unavailable')):
        deleted = purge_stale_locations(store=store, now=clock.now)

    assert deleted == 0
    assert 'Error cleaning up locations' in caplog.text
    assert store.get('locations', 'stale').exists


def test_task_uses_configured_store(store, clock):
    _put_location(store, 'stale', clock.now - timedelta(days=10))
    assert tasks.cleanup_stale_locations() == 1


def test_task_swallows_unexpected_errors(caplog):
    caplog.set_level(logging.ERROR)
    with mock.patch(
        'apps.locations.services.cleanup.purge_stale_locations',
        side_effect=RuntimeError('boom'),
    ):
        assert tasks.cleanup_stale_locations() == 0
    assert 'Stale location cleanup failed' in caplog.text
