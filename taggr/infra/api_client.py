"""
Taggr API client infrastructure.

Wraps the CLI endpoints of the taggr HTTP API. Every response is an
envelope ``{success, data, error?}``; this client unwraps ``data`` and turns
transport failures into NetworkError and error envelopes into ApiError.
"""

import logging
from typing import Optional, List, Dict, Any
from urllib.parse import quote

import requests

from ..domain import RemoteLabel
from ..errors import NetworkError, ApiError

logger = logging.getLogger(__name__)

# Default HTTP timeout in seconds
DEFAULT_TIMEOUT = 30


class TaggrClient:
    """
    Client for the taggr REST API.

    Constructed explicitly from configuration and passed to the components
    that need it; there is no module-level client.
    """

    def __init__(self, api_url: str, api_key: str, timeout: int = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        """
        Initialize TaggrClient.

        Args:
            api_url: Base API URL, e.g. https://taggr.onrender.com/api
            api_key: API key sent as X-API-Key
            timeout: HTTP request timeout in seconds
            session: Optional pre-built session (used by tests)
        """
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'Content-Type': 'application/json',
            'X-API-Key': api_key,
        })

    def _get(self, path: str) -> Any:
        url = f"{self.api_url}{path}"
        logger.debug(f"GET {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.debug(f"Request to {url} failed: {e}")
            raise NetworkError() from e
        except requests.RequestException as e:
            raise NetworkError(f"Network error: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            message = _error_message(body) or f"API error: {response.status_code}"
            raise ApiError(message, status_code=response.status_code, code=_error_code(body))

        if not isinstance(body, dict):
            raise ApiError("Invalid response from server: expected a JSON object",
                           status_code=response.status_code)

        if not body.get('success', False):
            raise ApiError(_error_message(body) or "Request was not successful",
                           status_code=response.status_code, code=_error_code(body))

        return body.get('data')

    def whoami(self) -> Dict[str, Any]:
        """Return the authenticated user record."""
        data = self._get('/cli/whoami')
        if not isinstance(data, dict) or 'user' not in data:
            raise ApiError("Invalid response from server: user data not found")
        return data['user']

    def list_labels(self) -> List[RemoteLabel]:
        """
        Fetch all labels of the authenticated user.

        Entries without a name or value are dropped with a debug log.
        """
        data = self._get('/cli/labels')
        if not isinstance(data, dict) or not isinstance(data.get('labels'), list):
            raise ApiError("Invalid response from server: labels data not found")

        labels = []
        for raw in data['labels']:
            label = RemoteLabel.from_api_response(raw)
            if label is None:
                logger.debug(f"Skipping invalid label in response: {raw!r}")
                continue
            labels.append(label)
        return labels

    def get_label(self, name: str) -> RemoteLabel:
        """Fetch one label by name."""
        data = self._get(f"/cli/labels/{quote(name, safe='')}")
        label = RemoteLabel.from_api_response(data.get('label') if isinstance(data, dict) else None)
        if label is None:
            raise ApiError("Invalid response from server: label data not found")
        return label

    def label_versions(self) -> Dict[str, str]:
        """Map of label name to current remote version."""
        return {label.name: label.version for label in self.list_labels()}


def _error_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        error = body.get('error')
        if isinstance(error, dict):
            return error.get('message')
        if isinstance(error, str):
            return error
    return None


def _error_code(body: Any) -> Optional[str]:
    if isinstance(body, dict) and isinstance(body.get('error'), dict):
        return body['error'].get('code')
    return None
