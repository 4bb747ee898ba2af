"""
Slack notifications for newly created orders
Delivery is best effort: failures are logged and never reach the caller
"""

import logging
from typing import Optional

import httpx

from app import config
from app.utils.error_handler import NotificationError
from app.utils.formatting import format_vnd

logger = logging.getLogger(__name__)

def build_order_message(order) -> dict:
    """Slack Block Kit payload describing one order"""
    item_lines = "\n".join(
        f"• {item.product_name} (x{item.quantity}) - {format_vnd(item.total)} VND"
        for item in order.items
    )
    return {
        "text": f"New order received: {order.order_number}",
        "blocks": [
            {
                "type": "header",
                "text": {"type": "plain_text", "text": f"New Order: {order.order_number}"},
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*Customer:*\n{order.customer_name}"},
                    {"type": "mrkdwn", "text": f"*Phone:*\n{order.customer_phone}"},
                    {"type": "mrkdwn", "text": f"*Email:*\n{order.customer_email}"},
                    {"type": "mrkdwn", "text": f"*Total:*\n{format_vnd(order.subtotal)} VND"},
                ],
            },
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"*Items:*\n{item_lines}"},
            },
        ],
    }

class SlackNotifier:
    """Posts order messages to a Slack incoming webhook"""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def _post(self, payload: dict) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(f"Slack responded with HTTP {e.response.status_code}", e)
        except httpx.HTTPError as e:
            raise NotificationError(f"Slack webhook unreachable: {e}", e)

    async def notify_order_created(self, order) -> bool:
        """Send the new-order message; returns whether Slack accepted it"""
        if not self.webhook_url:
            logger.warning("Slack webhook URL not configured; skipping order notification")
            return False

        try:
            await self._post(build_order_message(order))
        except NotificationError as e:
            logger.error(f"Failed to send Slack notification for order {order.order_number}: {e}")
            return False

        logger.info(f"Slack notification sent for order {order.order_number}")
        return True

def get_notifier() -> SlackNotifier:
    """Dependency returning a notifier built from the current configuration"""
    return SlackNotifier(
        webhook_url=config.SLACK_WEBHOOK_URL,
        timeout_seconds=config.NOTIFICATION_TIMEOUT_SECONDS,
    )
