"""Webhook notification of injection results."""

from typing import Any, Dict

import requests
from requests.exceptions import RequestException

from injector.core.config import Settings
from injector.core.logging_config import get_logger
from injector.models.suggestion import InjectionOutcome

logger = get_logger(__name__)


def build_summary_payload(outcome: InjectionOutcome) -> Dict[str, Any]:
    return {
        "event": "suggestions_injected",
        "message": outcome.summary(),
        "success": outcome.success_count,
        "failed": outcome.failed_count,
        "errors": [error.kind.value for error in outcome.per_item_errors],
        "fatal_error": outcome.fatal_error,
    }


def notify_injection_summary(outcome: InjectionOutcome, settings: Settings) -> bool:
    """
    Send the run summary to the configured webhook.

    Returns:
        bool: True if a notification was delivered, False when disabled or failed
    """
    if not settings.WEBHOOK_URL:
        return False

    try:
        logger.info(f"Sending injection summary to {settings.WEBHOOK_URL}")
        response = requests.post(
            settings.WEBHOOK_URL,
            json=build_summary_payload(outcome),
            headers={"Content-Type": "application/json"},
            timeout=10,
        )
        response.raise_for_status()
        logger.info(f"Injection summary sent successfully: {response.status_code}")
        return True
    except RequestException as e:
        # The injection itself already happened; only the notification is lost
        logger.warning(f"Failed to send injection summary: {str(e)}")
        return False
