"""
API utilities for the Firestore to Supabase migration tool
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional, TypeVar

import httpx
from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.oauth2 import service_account
from postgrest.exceptions import APIError
from supabase import Client, create_client

from firestore_migrator.constants import (
    MAX_RETRY_DELAY,
    RETRY_BACKOFF_FACTOR,
    RETRYABLE_STATUS_CODES,
)
from firestore_migrator.exceptions import ConfigError
from firestore_migrator.utils.logging import log_with_context

REQUIRED_SCOPES = [
    "https://www.googleapis.com/auth/datastore",
    "https://www.googleapis.com/auth/cloud-platform",
]

# Errors worth retrying: network hiccups and server-side overload
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    httpx.TransportError,
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
    google_exceptions.TooManyRequests,
)


def is_transient(error: BaseException) -> bool:
    """True for network errors and rate-limit or server-side failures."""
    if isinstance(error, TRANSIENT_ERRORS):
        return True
    if isinstance(error, APIError):
        return str(error.code) in RETRYABLE_STATUS_CODES
    return False


# Cache for client instances
_client_cache: Dict[str, Any] = {}

T = TypeVar("T")


def call_with_retry(
    fn: Callable[[], T],
    max_retries: int = 3,
    retry_delay: float = 1,
    description: str = "API call",
    **log_kwargs: Any,
) -> T:
    """Call *fn*, retrying transient errors with exponential backoff.

    Non-transient errors propagate immediately.

    Args:
        fn: Zero-argument callable performing the request
        max_retries: Retries after the first attempt
        retry_delay: Initial delay in seconds
        description: Label used in log lines
        **log_kwargs: Extra context for log records

    Returns:
        Whatever *fn* returns
    """
    for attempt in range(max_retries + 1):
        try:
            return fn()
        except Exception as e:
            if not is_transient(e):
                raise
            if attempt >= max_retries:
                log_with_context(
                    logging.ERROR,
                    f"{description}: max retries reached. Last error: {e}",
                    **log_kwargs,
                )
                raise
            sleep_time = min(
                retry_delay * (RETRY_BACKOFF_FACTOR**attempt), MAX_RETRY_DELAY
            )
            log_with_context(
                logging.WARNING,
                f"{description}: transient error ({e}), retrying in {sleep_time:.1f} seconds...",
                **log_kwargs,
            )
            time.sleep(sleep_time)

    raise RuntimeError("Exited retry loop unexpectedly.")


def get_firestore_client(
    creds_path: str, project_id: Optional[str] = None
) -> firestore.Client:
    """Get a Firestore client authenticated with a service account key file."""
    cache_key = f"firestore:{creds_path}:{project_id}"
    if cache_key in _client_cache:
        log_with_context(logging.DEBUG, "Using cached Firestore client")
        return _client_cache[cache_key]

    try:
        creds = service_account.Credentials.from_service_account_file(
            creds_path, scopes=REQUIRED_SCOPES
        )
    except (OSError, ValueError) as e:
        raise ConfigError(
            f"Could not load service account credentials from {creds_path}: {e}"
        ) from e

    client = firestore.Client(
        project=project_id or creds.project_id, credentials=creds
    )
    log_with_context(
        logging.DEBUG,
        f"Created Firestore client for project {client.project}",
    )
    _client_cache[cache_key] = client
    return client


def get_supabase_client(url: str, key: str) -> Client:
    """Get a Supabase client for the given project URL and API key."""
    if not url or not key:
        raise ConfigError(
            "Supabase URL and key are required. Set supabase.url/supabase.key in "
            "the config file or SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY in the environment."
        )

    cache_key = f"supabase:{url}"
    if cache_key in _client_cache:
        return _client_cache[cache_key]

    client = create_client(url, key)
    log_with_context(logging.DEBUG, f"Created Supabase client for {url}")
    _client_cache[cache_key] = client
    return client
