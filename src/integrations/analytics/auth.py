"""Service account authentication for the GA4 Data API.

Handles credential creation and service instance caching so report calls
don't rebuild credentials or refetch discovery documents per request.
"""

from __future__ import annotations

from typing import Any

import httplib2
import structlog
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build

logger = structlog.get_logger(__name__)

ANALYTICS_SCOPES = [
    "https://www.googleapis.com/auth/analytics.readonly",
]


class GA4AuthManager:
    """Creates and caches the GA4 Data API service from a service account key file.

    Args:
        service_account_file: Path to the service account JSON key.
    """

    def __init__(self, service_account_file: str) -> None:
        self._service_account_file = service_account_file
        self._credentials: service_account.Credentials | None = None
        self._service: Any = None

    def _build_credentials(self) -> service_account.Credentials:
        if self._credentials is None:
            self._credentials = service_account.Credentials.from_service_account_file(
                self._service_account_file,
                scopes=ANALYTICS_SCOPES,
            )
        return self._credentials

    def get_data_service(self) -> Any:
        """Get the cached analyticsdata v1beta Resource object."""
        if self._service is None:
            logger.info("building_analytics_data_service")
            self._service = build(
                "analyticsdata",
                "v1beta",
                credentials=self._build_credentials(),
                cache_discovery=False,
            )
        return self._service

    def authorized_http(self) -> AuthorizedHttp:
        """Fresh authorized transport for a single execute() call.

        httplib2 connections are not thread safe and reports run concurrently
        in worker threads, so each request gets its own transport.
        """
        return AuthorizedHttp(self._build_credentials(), http=httplib2.Http())
