"""Port for expiration notifications - driven/secondary port."""

from typing import Protocol

from ...domain.entities import NotificationItem


class Notifier(Protocol):
    """Port for reporting flagged applications to operators."""

    async def notify(self, items: list[NotificationItem]) -> None:
        """
        Deliver one report covering all ``items``.

        An empty list is a no-op.

        Raises:
            DeliveryError: If the report could not be delivered.
        """
        ...

    async def test_connection(self) -> bool:
        """
        Check that the delivery channel is usable.

        Returns:
            True if the channel responded; never raises.
        """
        ...
