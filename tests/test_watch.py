"""
Tests for the watch loop: change classification, pulling on change and
resilience to per-cycle failures.
"""

import threading
from unittest.mock import MagicMock

import pytest
import requests

from taggr.domain import RemoteLabel
from taggr.errors import NetworkError
from taggr.infra import TaggrClient
from taggr.sync import (
    PullClient,
    SyncMetadataStore,
    WatchLoop,
    WatchState,
    classify_changes,
    resolve_interval,
)

API_URL = "https://api.example.com/api"


def remote(name, version="1.0.0", value="v"):
    return RemoteLabel(name=name, value=value, version=version)


@pytest.fixture
def client():
    mock = MagicMock(spec=TaggrClient)
    mock.api_url = API_URL
    return mock


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "taggr"


@pytest.fixture
def puller(client, output_dir):
    return PullClient(client, output_dir)


class TestClassifyChanges:

    def test_updated_new_and_deleted(self, output_dir):
        store = SyncMetadataStore(output_dir)
        store.save([remote("a"), remote("gone"), remote("same")], API_URL)

        diff = classify_changes(store.load(), [remote("a", "1.0.1"), remote("b"), remote("same")])

        assert diff.updated == [("a", "1.0.0", "1.0.1")]
        assert diff.new == ["b"]
        assert diff.deleted == ["gone"]
        assert not diff.is_empty

    def test_no_changes(self, output_dir):
        store = SyncMetadataStore(output_dir)
        store.save([remote("a")], API_URL)
        assert classify_changes(store.load(), [remote("a")]).is_empty

    def test_without_metadata_everything_is_new(self):
        diff = classify_changes(None, [remote("a"), remote("b")])
        assert diff.new == ["a", "b"]


class TestWatchLoop:

    def test_cycle_pulls_updates_and_new_labels(self, puller, client, output_dir):
        store = SyncMetadataStore(output_dir)
        store.save([remote("A")], API_URL)
        client.list_labels.return_value = [remote("A", "1.0.1"), remote("B", "1.0.0")]
        reported = []

        loop = WatchLoop(puller, interval=5, on_change=reported.append)
        diff = loop.run_cycle()

        assert diff.updated == [("A", "1.0.0", "1.0.1")]
        assert diff.new == ["B"]
        assert reported == [diff]
        assert store.load().versions() == {"A": "1.0.1", "B": "1.0.0"}
        assert (output_dir / "labels.json").exists()
        assert loop.state == WatchState.IDLE

    def test_empty_diff_does_not_pull(self, puller, client, output_dir):
        store = SyncMetadataStore(output_dir)
        store.save([remote("a")], API_URL)
        client.list_labels.return_value = [remote("a")]
        puller.write_all = MagicMock()
        on_change = MagicMock()

        diff = WatchLoop(puller, on_change=on_change).run_cycle()

        assert diff.is_empty
        on_change.assert_not_called()
        puller.write_all.assert_not_called()

    def test_fetch_failure_is_logged_and_survived(self, puller, client, output_dir, caplog):
        SyncMetadataStore(output_dir).save([remote("a")], API_URL)
        client.list_labels.side_effect = [NetworkError(), [remote("a", "1.0.1")]]
        errors = []
        loop = WatchLoop(puller, on_error=errors.append)

        assert loop.run_cycle() is None
        assert "Failed to fetch labels" in caplog.text
        assert isinstance(errors[0], NetworkError)

        diff = loop.run_cycle()
        assert diff.updated == [("a", "1.0.0", "1.0.1")]
        assert loop.iteration == 2

    def test_unexpected_fetch_error_is_survived(self, puller, client, output_dir):
        SyncMetadataStore(output_dir).save([remote("a")], API_URL)
        client.list_labels.side_effect = [TypeError("bad payload"), [remote("a", "1.0.1")]]
        loop = WatchLoop(puller)

        assert loop.run_cycle() is None
        assert loop.run_cycle().updated == [("a", "1.0.0", "1.0.1")]
        assert loop.state == WatchState.IDLE

    def test_malformed_tags_do_not_stop_watch(self, output_dir):
        session = MagicMock(spec=requests.Session)
        session.headers = {}
        response = MagicMock(ok=True, status_code=200)
        response.json.return_value = {"success": True, "data": {"labels": [
            {"name": "a", "value": "x", "version": "1.0.0", "tags": 5},
        ]}}
        session.get.return_value = response
        puller = PullClient(TaggrClient(API_URL, "key", session=session), output_dir)

        WatchLoop(puller, interval=0).run(max_cycles=2)

        assert session.get.call_count == 2
        assert SyncMetadataStore(output_dir).load().versions() == {"a": "1.0.0"}

    def test_write_failure_is_survived(self, puller, client, output_dir):
        SyncMetadataStore(output_dir).save([remote("a")], API_URL)
        client.list_labels.return_value = [remote("a", "2.0.0")]
        puller.write_all = MagicMock(side_effect=OSError("read-only"))

        assert WatchLoop(puller).run_cycle() is None

    def test_tick_skipped_while_busy(self, puller, client):
        loop = WatchLoop(puller)
        loop._busy.acquire()
        try:
            assert loop.run_cycle() is None
        finally:
            loop._busy.release()
        client.list_labels.assert_not_called()

    def test_run_stops_after_max_cycles(self, puller, client):
        client.list_labels.side_effect = NetworkError()
        loop = WatchLoop(puller, interval=0)
        loop.run(max_cycles=3)
        assert client.list_labels.call_count == 3

    def test_stop_ends_run(self, puller, client):
        client.list_labels.return_value = []
        loop = WatchLoop(puller, interval=60)
        worker = threading.Thread(target=loop.run)
        worker.start()
        loop.stop()
        worker.join(timeout=5)
        assert not worker.is_alive()
        assert loop.stopped


class TestResolveInterval:

    def test_default(self):
        assert resolve_interval(None) == 30

    def test_below_minimum_falls_back(self, caplog):
        assert resolve_interval(2) == 30
        assert "at least 5 seconds" in caplog.text

    def test_valid_value_kept(self):
        assert resolve_interval(10) == 10
