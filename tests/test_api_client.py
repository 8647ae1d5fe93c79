"""
Tests for the taggr API client with a mocked requests session.
"""

import unittest
from unittest.mock import MagicMock

import requests

from taggr.errors import ApiError, NetworkError
from taggr.infra import TaggrClient

API_URL = "https://api.example.com/api"


def make_response(status=200, body=None, json_error=False):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 400
    if json_error:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


class TestTaggrClient(unittest.TestCase):

    def setUp(self):
        self.session = MagicMock(spec=requests.Session)
        self.session.headers = {}
        self.client = TaggrClient(API_URL + "/", "key-123", timeout=7, session=self.session)

    def test_headers_and_url(self):
        self.assertEqual(self.client.api_url, API_URL)
        self.assertEqual(self.session.headers["X-API-Key"], "key-123")
        self.assertEqual(self.session.headers["Accept"], "application/json")

    def test_list_labels(self):
        self.session.get.return_value = make_response(body={
            "success": True,
            "data": {"labels": [
                {"name": "greeting", "value": "Hello", "version": "1.2.0", "displayName": "Greeting",
                 "tags": ["ui"], "isPublished": True, "packageName": "@alice/greeting"},
                {"name": "no-value"},
                {"value": "no-name"},
            ], "count": 3},
        })

        labels = self.client.list_labels()

        self.session.get.assert_called_once_with(f"{API_URL}/cli/labels", timeout=7)
        self.assertEqual(len(labels), 1)
        label = labels[0]
        self.assertEqual(label.name, "greeting")
        self.assertEqual(label.version, "1.2.0")
        self.assertEqual(label.tags, ("ui",))
        self.assertTrue(label.is_published)
        self.assertEqual(label.package_name, "@alice/greeting")

    def test_label_versions(self):
        self.session.get.return_value = make_response(body={
            "success": True,
            "data": {"labels": [{"name": "a", "value": "1", "version": "2.0.0"}, {"name": "b", "value": "2"}]},
        })
        self.assertEqual(self.client.label_versions(), {"a": "2.0.0", "b": "1.0.0"})

    def test_get_label_quotes_name(self):
        self.session.get.return_value = make_response(body={
            "success": True, "data": {"label": {"name": "a b", "value": "x"}},
        })
        label = self.client.get_label("a b")
        self.session.get.assert_called_once_with(f"{API_URL}/cli/labels/a%20b", timeout=7)
        self.assertEqual(label.name, "a b")

    def test_get_label_missing_data(self):
        self.session.get.return_value = make_response(body={"success": True, "data": {}})
        with self.assertRaises(ApiError):
            self.client.get_label("a")

    def test_whoami(self):
        self.session.get.return_value = make_response(body={
            "success": True, "data": {"user": {"uid": "u1", "email": "a@example.com"}},
        })
        self.assertEqual(self.client.whoami()["uid"], "u1")

    def test_error_envelope(self):
        self.session.get.return_value = make_response(status=404, body={
            "success": False, "error": {"code": "NOT_FOUND", "message": "Label not found"},
        })
        with self.assertRaises(ApiError) as ctx:
            self.client.get_label("missing")
        self.assertEqual(str(ctx.exception), "Label not found")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.code, "NOT_FOUND")

    def test_non_json_error(self):
        self.session.get.return_value = make_response(status=502, json_error=True)
        with self.assertRaises(ApiError) as ctx:
            self.client.list_labels()
        self.assertEqual(str(ctx.exception), "API error: 502")

    def test_unsuccessful_envelope_with_ok_status(self):
        self.session.get.return_value = make_response(body={"success": False, "error": "nope"})
        with self.assertRaises(ApiError):
            self.client.list_labels()

    def test_connection_error_has_remediation(self):
        self.session.get.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(NetworkError) as ctx:
            self.client.list_labels()
        self.assertIn("Cannot connect to Taggr API", str(ctx.exception))

    def test_timeout_is_network_error(self):
        self.session.get.side_effect = requests.Timeout("slow")
        with self.assertRaises(NetworkError):
            self.client.whoami()
