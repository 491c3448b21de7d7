"""
Notification utilities for sending alerts.

Alerts are raised when an order needs manual attention, typically when an
eSIM was provisioned but the Shopify fulfillment could not be recorded.
"""

import logging
from typing import Any, Dict

from esim_bridge.core.config import Settings

logger = logging.getLogger(__name__)


async def send_error_alert(settings: Settings, alert_data: Dict[str, Any]) -> None:
    """
    Send error alert notification.

    The alert is always logged at CRITICAL so log-based monitoring picks it up.

    Args:
        settings: Application settings
        alert_data: Dictionary containing error information
    """
    logger.critical(
        f"ALERT: {alert_data.get('error_type')} - "
        f"Message: {alert_data.get('message')} - "
        f"Order: {alert_data.get('details', {}).get('order_id')}",
        extra={"alert": alert_data},
    )

    if not settings.ALERT_EMAIL_ENABLED:
        logger.info("Email alerts disabled, skipping alert notification")
        return

    if not settings.ALERT_EMAIL_TO:
        logger.warning("ALERT_EMAIL_ENABLED is set but ALERT_EMAIL_TO is empty")
        return

    # TODO: wire an SMTP or transactional email provider for ALERT_EMAIL_TO
    logger.warning(f"Email alert to {settings.ALERT_EMAIL_TO} not sent: no email transport configured")
