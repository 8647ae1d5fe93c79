"""
Tests for PullClient: local file generation and metadata updates.
"""

import json
import warnings
from unittest.mock import MagicMock

import pytest

from taggr.domain import RemoteLabel
from taggr.errors import DriftDetectedWarning, NetworkError
from taggr.infra import TaggrClient
from taggr.sync import PullClient, SyncMetadataStore
from taggr.sync.pull_client import render_type_declarations

API_URL = "https://api.example.com/api"


def remote(name, value, version="1.0.0"):
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


def read_json(path):
    return json.loads(path.read_text())


class TestPullAll:

    def test_writes_files_and_metadata(self, puller, client, output_dir):
        client.list_labels.return_value = [
            remote("welcome-message", 'He said "hi"'),
            remote("greeting", "Hello", "1.2.0"),
        ]

        result = puller.pull_all()

        assert result.count == 2
        assert read_json(output_dir / "labels.json") == {
            "greeting": "Hello",
            "welcomeMessage": 'He said "hi"',
        }
        types = (output_dir / "labels.d.ts").read_text()
        assert '"welcomeMessage": string;' in types
        assert "export default labels;" in types

        metadata = SyncMetadataStore(output_dir).load()
        assert metadata.versions() == {"welcome-message": "1.0.0", "greeting": "1.2.0"}
        assert metadata.source_url == API_URL
        assert set(result.files) == {
            output_dir / "labels.json",
            output_dir / "labels.d.ts",
            output_dir / ".taggr.json",
        }

    def test_replaces_previous_contents(self, puller, client, output_dir):
        client.list_labels.return_value = [remote("a", "1"), remote("b", "2")]
        puller.pull_all()
        client.list_labels.return_value = [remote("b", "3", "1.0.1")]
        puller.pull_all()

        assert read_json(output_dir / "labels.json") == {"b": "3"}
        assert SyncMetadataStore(output_dir).load().versions() == {"b": "1.0.1"}

    def test_no_labels_writes_nothing(self, puller, client, output_dir):
        client.list_labels.return_value = []
        result = puller.pull_all()
        assert result.count == 0
        assert not output_dir.exists()

    def test_drift_warns_but_pull_wins(self, puller, client, output_dir):
        client.list_labels.return_value = [remote("greeting", "Hello")]
        puller.pull_all()
        (output_dir / "labels.json").write_text(json.dumps({"greeting": "hand edited"}))

        with pytest.warns(DriftDetectedWarning):
            result = puller.pull_all()

        assert result.drift.is_edited is True
        assert result.drift.labels == ["greeting"]
        assert read_json(output_dir / "labels.json") == {"greeting": "Hello"}

    def test_clean_pull_reports_no_drift(self, puller, client):
        client.list_labels.return_value = [remote("greeting", "Hello")]
        puller.pull_all()
        with warnings.catch_warnings():
            warnings.simplefilter("error", DriftDetectedWarning)
            result = puller.pull_all()
        assert result.drift.is_edited is False

    def test_numeric_api_version_keeps_metadata_readable(self, puller, client, output_dir):
        client.list_labels.return_value = [
            RemoteLabel.from_api_response({"name": "a", "value": "x", "version": 2}),
        ]
        puller.pull_all()

        metadata = SyncMetadataStore(output_dir).load()
        assert metadata is not None
        assert metadata.versions() == {"a": "2"}

    def test_network_error_propagates(self, puller, client, output_dir):
        client.list_labels.side_effect = NetworkError()
        with pytest.raises(NetworkError):
            puller.pull_all()
        assert not output_dir.exists()


class TestPullOne:

    def test_merges_into_existing_files(self, puller, client, output_dir):
        client.list_labels.return_value = [remote("a", "1"), remote("b", "2")]
        puller.pull_all()

        client.get_label.return_value = remote("b", "updated", "1.1.0")
        result = puller.pull_one("b")

        client.get_label.assert_called_once_with("b")
        assert result.labels[0].version == "1.1.0"
        assert read_json(output_dir / "labels.json") == {"a": "1", "b": "updated"}
        assert SyncMetadataStore(output_dir).load().versions() == {"a": "1.0.0", "b": "1.1.0"}

    def test_first_pull_creates_files(self, puller, client, output_dir):
        client.get_label.return_value = remote("solo-label", "x")
        puller.pull_one("solo-label")

        assert read_json(output_dir / "labels.json") == {"soloLabel": "x"}
        assert '"soloLabel": string;' in (output_dir / "labels.d.ts").read_text()

    def test_unreadable_local_file_is_replaced(self, puller, client, output_dir):
        output_dir.mkdir(parents=True)
        (output_dir / "labels.json").write_text("{oops")
        client.get_label.return_value = remote("a", "1")

        puller.pull_one("a")
        assert read_json(output_dir / "labels.json") == {"a": "1"}


def test_type_declarations_are_sorted():
    text = render_type_declarations(["zeta", "alpha"])
    assert text.index('"alpha"') < text.index('"zeta"')
    assert "export interface Labels {" in text
