"""Base delivery backend and the message it delivers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MailMessage:
    """A rendered report addressed to one or more recipients."""

    sender: str
    recipients: tuple[str, ...]
    subject: str
    html: str
    text: str


def split_addresses(raw: str) -> tuple[str, ...]:
    """Split a comma-separated address list, dropping blanks."""
    return tuple(addr.strip() for addr in raw.split(",") if addr.strip())


class BaseDeliveryBackend(ABC):
    """Abstract base class for mail delivery backends."""

    def __init__(self) -> None:
        """Initialize the delivery backend."""
        self._logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def send(self, message: MailMessage) -> None:
        """
        Deliver the message.

        Raises:
            DeliveryError: If the message could not be delivered.
        """
        ...

    @abstractmethod
    async def test_connection(self) -> bool:
        """Check the backend is usable. Never raises."""
        ...
