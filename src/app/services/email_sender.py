from abc import ABC, abstractmethod


class EmailSender(ABC):
    """Outbound account emails - application layer"""

    @abstractmethod
    async def send_verification_email(self, to: str, user_name: str, token: str) -> None:
        pass

    @abstractmethod
    async def send_password_reset_email(self, to: str, user_name: str, token: str) -> None:
        pass

    @abstractmethod
    async def send_password_changed_email(self, to: str, user_name: str) -> None:
        pass
