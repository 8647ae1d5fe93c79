"""
Tests for label and label-set checksums.
"""

import hashlib
import itertools

from taggr.domain import RemoteLabel
from taggr.sync.checksum import checksum_for, label_checksum, set_checksum, checksum_of_entries


def remote(name, value="v", version="1.0.0"):
    return RemoteLabel(name=name, value=value, version=version)


class TestLabelChecksum:

    def test_is_sha256_of_name_value_version(self):
        expected = hashlib.sha256(b"greeting:Hello:1.0.0").hexdigest()
        assert checksum_for("greeting", "Hello", "1.0.0") == expected
        assert label_checksum(remote("greeting", "Hello")) == expected

    def test_deterministic(self):
        assert label_checksum(remote("a", "x")) == label_checksum(remote("a", "x"))

    def test_any_component_changes_output(self):
        base = checksum_for("a", "x", "1.0.0")
        assert checksum_for("b", "x", "1.0.0") != base
        assert checksum_for("a", "y", "1.0.0") != base
        assert checksum_for("a", "x", "1.0.1") != base

    def test_none_value_treated_as_empty(self):
        assert checksum_for("a", None, "1.0.0") == checksum_for("a", "", "1.0.0")


class TestSetChecksum:

    def test_order_independent(self):
        labels = [remote("alpha", "1"), remote("beta", "2"), remote("gamma", "3")]
        results = {set_checksum(list(p)) for p in itertools.permutations(labels)}
        assert len(results) == 1

    def test_joins_per_label_checksums_in_name_order(self):
        a, b = remote("a", "1"), remote("b", "2")
        joined = f"{label_checksum(a)}|{label_checksum(b)}"
        assert set_checksum([b, a]) == hashlib.sha256(joined.encode()).hexdigest()

    def test_changes_when_a_label_changes(self):
        before = set_checksum([remote("a", "1"), remote("b", "2")])
        after = set_checksum([remote("a", "1"), remote("b", "2", version="1.0.1")])
        assert before != after

    def test_matches_checksum_of_entries(self):
        labels = [remote("b", "2"), remote("a", "1")]
        entries = {l.name: label_checksum(l) for l in labels}
        assert checksum_of_entries(entries) == set_checksum(labels)
