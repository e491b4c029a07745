# headpress/services/webhook.py
"""
Outbound webhook notifications.

An event is delivered only when a webhook URL is configured *and* the event
name appears in the comma-separated ``webhook_events`` setting. Delivery runs
as a background task after the response is sent; failures are logged and
never reach the caller.
"""
import hashlib
import hmac
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from fastapi import BackgroundTasks

from headpress.core.metrics import webhook_deliveries_total

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Webhook-Signature"
EVENT_HEADER = "X-Webhook-Event"
USER_AGENT = "headpress-webhook/1.0"


def sign_payload(body: bytes, secret: str) -> str:
    """HMAC-SHA256 of the raw body, hex encoded."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def enabled_events(site_settings: Dict[str, str]) -> set:
    raw = site_settings.get("webhook_events") or ""
    return {name.strip() for name in raw.split(",") if name.strip()}


def is_valid_webhook_url(url: str) -> bool:
    """Empty (webhooks off) or an absolute http(s) URL."""
    if not url:
        return True
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.host)


def build_envelope(event: str, payload: Any, site_settings: Dict[str, str]) -> Dict[str, Any]:
    return {
        "event": event,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": payload,
        "site_url": (site_settings.get("site_url") or "").rstrip("/"),
    }


class WebhookNotifier:
    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.BaseTransport] = None):
        self.timeout = timeout
        self._transport = transport

    def should_send(self, event: str, site_settings: Dict[str, str]) -> bool:
        if not (site_settings.get("webhook_url") or "").strip():
            return False
        return event in enabled_events(site_settings)

    def dispatch(self, background_tasks: BackgroundTasks, event: str,
                 payload: Any, site_settings: Dict[str, str]) -> bool:
        """
        Schedules delivery of `event` if the settings allow it.
        Returns True when a delivery was scheduled.
        """
        if not self.should_send(event, site_settings):
            return False
        envelope = build_envelope(event, payload, site_settings)
        background_tasks.add_task(
            self.deliver,
            site_settings["webhook_url"].strip(),
            envelope,
            site_settings.get("webhook_secret") or None,
        )
        return True

    def deliver(self, url: str, envelope: Dict[str, Any], secret: Optional[str] = None) -> bool:
        event = envelope["event"]
        body = json.dumps(envelope, default=str).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
            EVENT_HEADER: event,
        }
        if secret:
            headers[SIGNATURE_HEADER] = f"sha256={sign_payload(body, secret)}"

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(url, content=body, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Webhook {event} delivery failed: {e}", extra={"event": event})
            webhook_deliveries_total.labels(event=event, outcome="error").inc()
            return False

        if response.is_success:
            logger.info(f"Webhook {event} delivered ({response.status_code})", extra={"event": event})
            webhook_deliveries_total.labels(event=event, outcome="success").inc()
            return True

        logger.warning(
            f"Webhook {event} rejected with status {response.status_code}",
            extra={"event": event, "status_code": response.status_code},
        )
        webhook_deliveries_total.labels(event=event, outcome="rejected").inc()
        return False
