"""
Shared-secret gate in front of the reconciliation trigger.
Maps reconciler outcomes onto HTTP-style status codes and JSON bodies.
"""

import hmac
import logging
from typing import Any, Dict, Optional, Tuple

from goldrate_tracker.constants import TRIGGER_MANUAL
from goldrate_tracker.exceptions import (
    AuthorizationError,
    ConfigurationError,
    NoDataAvailableError,
    StorageError,
)
from goldrate_tracker.services.reconciler import Reconciler

logger = logging.getLogger(__name__)


def authorize(key: Optional[str], expected_key: Optional[str]) -> None:
    """
    Check a presented key against the configured secret.

    Raises:
        ConfigurationError: If no secret is configured
        AuthorizationError: If the key does not match
    """
    if not expected_key:
        raise ConfigurationError("SECRET_KEY must be set to serve rates")
    if key is None or not hmac.compare_digest(key.encode('utf-8'), expected_key.encode('utf-8')):
        raise AuthorizationError("Unauthorized")


def handle_rates_request(
    key: Optional[str],
    reconciler: Reconciler,
    expected_key: Optional[str],
    trigger: str = TRIGGER_MANUAL
) -> Tuple[int, Dict[str, Any]]:
    """
    Authorize, refresh and render the outbound payload.

    Args:
        key: Key presented by the caller
        reconciler: Reconciler to refresh
        expected_key: Configured shared secret
        trigger: What caused the request (for logging)

    Returns:
        Tuple of (status_code, body)
    """
    try:
        authorize(key, expected_key)
    except AuthorizationError:
        logger.warning("Rejected rates request with invalid key")
        return 401, {'message': 'Unauthorized'}

    try:
        result = reconciler.refresh(trigger)
    except NoDataAvailableError as e:
        logger.error("No rates to serve: %s", e)
        return 503, {'message': 'No data available', 'error': str(e)}
    except StorageError as e:
        logger.exception("Storage failure while serving rates: %s", e)
        return 500, {'message': 'Internal Server Error', 'error': str(e)}

    return 200, result.to_dict()
