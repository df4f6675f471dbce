# File: secreq_api/application/ports/email_port.py
import abc

from secreq_api.domain.models import InviteEmail


class EmailSenderPort(abc.ABC):

    @abc.abstractmethod
    async def send(self, email: InviteEmail) -> None:
        """Hands the email to the provider. Raises ProviderError when it is refused."""
        raise NotImplementedError
