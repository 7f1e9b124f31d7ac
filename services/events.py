# services/events.py
"""
Outbound payment events.

The ledger publishes one PaymentEvent after each successful mutation.
Subscribers run in registration order; a failing subscriber is logged and
skipped so a notification problem never undoes or fails the mutation.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentEvent:
     action: str  # create | update | delete
     payment_id: str
     actor: str
     payload: Dict[str, Any] = field(default_factory=dict)

     def to_dict(self) -> Dict[str, Any]:
          return {
               "action": self.action,
               "uniqueId": self.payment_id,
               "actor": self.actor,
               **self.payload,
          }


Subscriber = Callable[[PaymentEvent], None]


class EventPublisher:
     def __init__(self):
          self._subscribers: List[Subscriber] = []

     def subscribe(self, subscriber: Subscriber) -> None:
          self._subscribers.append(subscriber)

     def publish(self, event: PaymentEvent) -> None:
          for subscriber in self._subscribers:
               try:
                    subscriber(event)
               except Exception as e:
                    logger.error(
                         "Event subscriber %s failed for %s %s: %s",
                         getattr(subscriber, "__name__", subscriber.__class__.__name__),
                         event.action,
                         event.payment_id,
                         e,
                    )
