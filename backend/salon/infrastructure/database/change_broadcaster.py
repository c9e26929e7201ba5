"""In-process change feed for the self-hosted store."""

import asyncio
import logging
from collections import defaultdict

from salon.application.interfaces import ChangeHandler, Subscription
from salon.domain.entities import ChangeEvent, Table

logger = logging.getLogger(__name__)


class LocalSubscription(Subscription):
    """Subscription to one table of a ChangeBroadcaster."""

    def __init__(self, broadcaster: "ChangeBroadcaster", table: Table, handler: ChangeHandler):
        self._broadcaster = broadcaster
        self.table = table
        self._handler = handler
        self.active = True

    def deliver(self, event: ChangeEvent) -> None:
        # Events scheduled before cancel() are dropped, not delivered late.
        if not self.active:
            return
        try:
            self._handler(event)
        except Exception:
            logger.exception("Change handler for '%s' failed", self.table.value)

    async def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self._broadcaster.detach(self)


class ChangeBroadcaster:
    """Fans committed row changes out to subscribers.

    Delivery is asynchronous: each handler runs on a later iteration of the
    event loop, never inside the writer's call stack. Per table, events are
    delivered in publish order.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[Table, list[LocalSubscription]] = defaultdict(list)

    def subscribe(self, table: Table, handler: ChangeHandler) -> LocalSubscription:
        subscription = LocalSubscription(self, table, handler)
        self._subscriptions[table].append(subscription)
        return subscription

    def detach(self, subscription: LocalSubscription) -> None:
        subscribers = self._subscriptions.get(subscription.table, [])
        if subscription in subscribers:
            subscribers.remove(subscription)

    def publish(self, event: ChangeEvent) -> None:
        loop = asyncio.get_running_loop()
        for subscription in list(self._subscriptions.get(event.table, [])):
            loop.call_soon(subscription.deliver, event)

    def subscriber_count(self, table: Table) -> int:
        return len(self._subscriptions.get(table, []))
