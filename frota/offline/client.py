"""HTTP client for the remote Frota API, used from the device."""

import requests

from frota.schemas import RecordKind
from frota.utils.error_handler import RemoteSubmissionError, RemoteUnavailableError
from frota.utils.logging_config import get_logger

logger = get_logger('frota.sync')


class RemoteApiClient:
    """
    Thin wrapper over ``requests`` for the creation endpoints.

    Every failure is raised as a :class:`RemoteSubmissionError`;
    :class:`RemoteUnavailableError` marks the ones where the server was never
    reached (connection refused, DNS, timeout), which the capture forms treat
    as "we are offline".
    """

    ENDPOINTS = {
        RecordKind.CHECKLIST: '/api/checklists',
        RecordKind.SUPPLY: '/api/supplies',
    }

    def __init__(self, base_url, api_token=None, timeout=15, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'User-Agent': 'Frota-Sync/1.0'
        })
        if api_token:
            self.session.headers['Authorization'] = f'Bearer {api_token}'

    def _url(self, path):
        return f'{self.base_url}{path}'

    def ping(self):
        """True when the API health endpoint answers 200."""
        try:
            response = self.session.get(self._url('/health'), timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug(f"Health probe failed: {e}")
            return False
        return response.status_code == 200

    def create(self, kind, submission, idempotency_key=None):
        """POST a submission and return the id the remote store generated."""
        kind = RecordKind(kind)
        headers = {}
        if idempotency_key:
            headers['Idempotency-Key'] = idempotency_key

        try:
            response = self.session.post(
                self._url(self.ENDPOINTS[kind]),
                json=submission.to_payload(),
                headers=headers,
                timeout=self.timeout
            )
        except requests.Timeout as e:
            raise RemoteUnavailableError(f'Timed out sending {kind.value}') from e
        except requests.RequestException as e:
            raise RemoteUnavailableError(f'Could not reach the API: {e}') from e

        if response.status_code >= 500:
            raise RemoteUnavailableError(
                f'Server error {response.status_code} sending {kind.value}',
                status_code=response.status_code
            )
        if response.status_code >= 400:
            raise RemoteSubmissionError(
                self._error_message(response) or f'{kind.value} rejected',
                status_code=response.status_code
            )

        try:
            return int(response.json()['id'])
        except (ValueError, KeyError, TypeError) as e:
            raise RemoteSubmissionError(
                f'Unexpected response creating {kind.value}',
                status_code=response.status_code
            ) from e

    def create_checklist(self, submission, idempotency_key=None):
        return self.create(RecordKind.CHECKLIST, submission, idempotency_key)

    def create_supply(self, submission, idempotency_key=None):
        return self.create(RecordKind.SUPPLY, submission, idempotency_key)

    @staticmethod
    def _error_message(response):
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            return body.get('message')
        return None
