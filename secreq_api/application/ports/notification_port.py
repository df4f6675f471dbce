# File: secreq_api/application/ports/notification_port.py
import abc


class NotificationPort(abc.ABC):
    """Delivers a text message to an external messaging endpoint."""

    @abc.abstractmethod
    async def deliver(self, target_url: str, message: str) -> bool:
        """
        Posts the message. Returns True on a 2xx response, False otherwise.
        Transport failures propagate.
        """
        raise NotImplementedError
