"""Latest-request-wins sequencing for callers that render repeatedly."""

import logging
from typing import Any, Awaitable, Callable, Tuple

logger = logging.getLogger(__name__)


class RenderSequencer:
    """Assigns increasing tickets to renders and discards superseded results.

    Example:
        >>> sequencer = RenderSequencer()
        >>> accepted, html = await sequencer.run(lambda: pipeline.render_for_preview(md))
    """

    def __init__(self):
        self._latest = 0

    def next_ticket(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return ticket == self._latest

    async def run(self, render: Callable[[], Awaitable[Any]]) -> Tuple[bool, Any]:
        """Run render under a fresh ticket.

        Returns:
            (True, value) if no newer render started meanwhile, else (False, None)
        """
        ticket = self.next_ticket()
        value = await render()
        if not self.is_current(ticket):
            logger.debug(f"Discarding stale render result (ticket {ticket}, latest {self._latest})")
            return False, None
        return True, value
