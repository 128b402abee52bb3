"""Flash notifications for the current interaction."""

import structlog

logger = structlog.get_logger()


class FlashNotifier:
    """Collects user-visible messages to send back with the response."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        logger.info("flash_notification", message=message)
        self.messages.append(message)

    def pull(self) -> list[str]:
        """Return and clear the pending messages."""
        messages, self.messages = self.messages, []
        return messages
