# services/notifier.py
"""
Discord webhook notifier.

Posts each payment event as a JSON code block. Delivery is a single attempt
with no retry; failures raise WebhookError, which the event publisher logs.
"""
import json
import logging
from typing import Optional

import requests

from services.errors import WebhookError
from services.events import PaymentEvent

logger = logging.getLogger(__name__)


class DiscordNotifier:
     def __init__(self, webhook_url: Optional[str], timeout: float = 10):
          self.webhook_url = webhook_url
          self.timeout = timeout

     def __call__(self, event: PaymentEvent) -> None:
          self.send(event)

     def send(self, event: PaymentEvent) -> None:
          if not self.webhook_url:
               logger.warning("DISCORD_WEBHOOK_URL not configured, skipping webhook")
               return

          body = json.dumps(event.to_dict(), indent=2, ensure_ascii=False, default=str)
          try:
               response = requests.post(
                    self.webhook_url,
                    json={"content": f"```json\n{body}\n```"},
                    timeout=self.timeout,
               )
          except requests.RequestException as e:
               raise WebhookError(f"Discord webhook request failed: {e}") from e

          if response.status_code not in (200, 204):
               raise WebhookError(f"Discord webhook error {response.status_code}: {response.text}")
