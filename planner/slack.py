"""
Slack delivery for generated meal plans via an Incoming Webhook
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    message: str


def escape_mrkdwn(text: str) -> str:
    """Escape the three characters Slack treats as control sequences"""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def build_slack_message(meals: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Block Kit payload with one section per meal"""
    blocks: List[Dict[str, Any]] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": ":knife_fork_plate: Weekly Meal Plan", "emoji": True},
        },
        {"type": "divider"},
    ]

    for meal in meals:
        lines = [
            f"*{escape_mrkdwn(meal['day'])}: {escape_mrkdwn(meal['title'])}*",
            escape_mrkdwn(meal["description"]),
        ]
        details = [
            escape_mrkdwn(value)
            for value in (meal.get("cookingTime"), meal.get("cuisine"))
            if value
        ]
        if details:
            lines.append(f"_{' | '.join(details)}_")
        blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": "\n".join(lines)}})

    return {
        "text": f"Weekly Meal Plan ({len(meals)} dinners)",
        "blocks": blocks,
    }


class SlackNotifier:
    """Posts meal plans to a Slack channel; reports failures instead of raising"""

    def __init__(
        self,
        webhook_url: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    async def send(self, meals: List[Dict[str, Any]]) -> DeliveryResult:
        if not self.is_configured:
            logger.warning("Slack webhook not configured")
            return DeliveryResult(False, "Slack webhook is not configured")

        payload = build_slack_message(meals)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Slack rejected meal plan", status_code=e.response.status_code, body=e.response.text[:200])
            return DeliveryResult(False, "Slack rejected the meal plan. Please check the webhook configuration.")
        except httpx.HTTPError as e:
            logger.error("Slack delivery failed", error=str(e), error_type=type(e).__name__)
            return DeliveryResult(False, "Unable to reach Slack. Please try again.")

        logger.info("Meal plan sent to Slack", meals=len(meals))
        return DeliveryResult(True, "Meal plan sent to Slack successfully")
