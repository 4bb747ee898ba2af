"""
Tests for Slack order notifications
"""

import asyncio
import json

import httpx

from app.schemas.order import OrderItemResponse, OrderResponse
from app.services.notification_service import SlackNotifier, build_order_message, get_notifier
from app.utils.formatting import format_vnd
from conftest import SlackRecorder

def sample_order():
    return OrderResponse(
        id=1,
        order_number="ORD-1760000000000-AB12",
        order_date="2026-10-19",
        customer_name="Nguyen Van An",
        customer_address="12 Le Loi",
        customer_phone="0901234567",
        customer_email="an.nguyen@example.com",
        ship_to_address=None,
        billing_name=None,
        billing_address=None,
        billing_tax_number=None,
        subtotal=55000000,
        status="PENDING",
        created_at=None,
        updated_at=None,
        items=[
            OrderItemResponse(id=1, product_id=2, product_name="iPhone 15 Pro", quantity=1,
                              unit_price=30000000, total=30000000),
            OrderItemResponse(id=2, product_id=3, product_name="Samsung Galaxy S24", quantity=1,
                              unit_price=25000000, total=25000000),
        ],
    )

class TestOrderMessage:

    def test_message_layout(self):
        message = build_order_message(sample_order())
        header, summary, items = message["blocks"]

        assert header["text"]["text"] == "New Order: ORD-1760000000000-AB12"
        assert [field["text"] for field in summary["fields"]] == [
            "*Customer:*\nNguyen Van An",
            "*Phone:*\n0901234567",
            "*Email:*\nan.nguyen@example.com",
            "*Total:*\n55,000,000 VND",
        ]
        assert items["text"]["text"] == (
            "*Items:*\n"
            "• iPhone 15 Pro (x1) - 30,000,000 VND\n"
            "• Samsung Galaxy S24 (x1) - 25,000,000 VND"
        )

    def test_format_vnd(self):
        assert format_vnd(200.0) == "200"
        assert format_vnd(25000000) == "25,000,000"
        assert format_vnd(1234.5) == "1,234.5"
        assert format_vnd(49.99) == "49.99"
        assert format_vnd(0) == "0"

class TestSlackNotifier:

    def test_posts_to_webhook(self):
        recorder = SlackRecorder()
        notifier = recorder.notifier()

        assert asyncio.run(notifier.notify_order_created(sample_order())) is True
        assert len(recorder.requests) == 1

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://hooks.slack.test/services/T000/B000/XXX"
        assert json.loads(request.content)["text"] == "New order received: ORD-1760000000000-AB12"

    def test_missing_webhook_skips(self):
        recorder = SlackRecorder()
        notifier = recorder.notifier(webhook_url="")

        assert asyncio.run(notifier.notify_order_created(sample_order())) is False
        assert recorder.requests == []

    def test_http_error_reported_as_failure(self):
        recorder = SlackRecorder(status_code=500)
        notifier = recorder.notifier()
        assert asyncio.run(notifier.notify_order_created(sample_order())) is False

    def test_unreachable_webhook_reported_as_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        notifier = SlackNotifier(
            webhook_url="https://hooks.slack.test/services/T000/B000/XXX",
            transport=httpx.MockTransport(refuse),
        )
        assert asyncio.run(notifier.notify_order_created(sample_order())) is False

class TestNotifierConfiguration:

    def test_default_timeout_is_ten_seconds(self):
        notifier = get_notifier()
        assert notifier.timeout_seconds == 10.0
        assert notifier.webhook_url == ""

    def test_timeout_reaches_http_client(self):
        seen = []

        def record(request):
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, text="ok")

        notifier = SlackNotifier(
            webhook_url="https://hooks.slack.test/services/T000/B000/XXX",
            timeout_seconds=get_notifier().timeout_seconds,
            transport=httpx.MockTransport(record),
        )
        assert asyncio.run(notifier.notify_order_created(sample_order())) is True
        assert seen[0]["read"] == 10.0
        assert seen[0]["connect"] == 10.0
