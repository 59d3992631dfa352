"""
Slack delivery tests
"""

import json

import httpx
import pytest

from planner import SlackNotifier
from planner.slack import build_slack_message, escape_mrkdwn

WEBHOOK_URL = "https://hooks.slack.test/services/T000/B000/XXX"


def _meals():
    return [
        {
            "day": "Monday",
            "title": "Mac & Cheese",
            "description": "Baked with a <crispy> top.",
            "cookingTime": "20 minutes",
            "cuisine": "American",
        },
        {
            "day": "Tuesday",
            "title": "Chana Masala",
            "description": "Chickpeas in a spiced tomato sauce.",
        },
    ]


class TestMessageFormatting:
    def test_escape(self):
        assert escape_mrkdwn("a & <b>") == "a &amp; &lt;b&gt;"

    def test_blocks(self):
        message = build_slack_message(_meals())

        assert message["text"] == "Weekly Meal Plan (2 dinners)"
        assert message["blocks"][0]["type"] == "header"
        assert message["blocks"][1] == {"type": "divider"}

        first = message["blocks"][2]["text"]["text"]
        assert first == (
            "*Monday: Mac &amp; Cheese*\n"
            "Baked with a &lt;crispy&gt; top.\n"
            "_20 minutes | American_"
        )

    def test_details_line_skipped_when_absent(self):
        second = build_slack_message(_meals())["blocks"][3]["text"]["text"]
        assert second == "*Tuesday: Chana Masala*\nChickpeas in a spiced tomato sauce."


@pytest.mark.asyncio
class TestSlackNotifier:
    async def test_not_configured(self):
        result = await SlackNotifier(None).send(_meals())

        assert not result.success
        assert result.message == "Slack webhook is not configured"

    async def test_posts_payload(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, text="ok")

        notifier = SlackNotifier(WEBHOOK_URL, transport=httpx.MockTransport(handler))
        result = await notifier.send(_meals())

        assert result.success
        assert str(requests[0].url) == WEBHOOK_URL
        assert json.loads(requests[0].content)["text"] == "Weekly Meal Plan (2 dinners)"

    async def test_rejected_by_slack(self):
        notifier = SlackNotifier(
            WEBHOOK_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(404, text="no_service")),
        )
        result = await notifier.send(_meals())

        assert not result.success
        assert "webhook configuration" in result.message

    async def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        notifier = SlackNotifier(WEBHOOK_URL, transport=httpx.MockTransport(handler))
        result = await notifier.send(_meals())

        assert not result.success
        assert result.message == "Unable to reach Slack. Please try again."
