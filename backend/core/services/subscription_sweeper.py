# ------------------------------ IMPORTS ------------------------------
import asyncio
from typing import Any, Dict, Optional
import logging

from core.config.settings import settings
from core.database import SessionLocal
from core.services.email_service import EmailService, email_service
from subscriptions.service import SubscriptionService

# ------------------------------ LOGGING ------------------------------
logger = logging.getLogger(__name__)

# ------------------------------ SUBSCRIPTION SWEEPER ------------------------------

class SubscriptionSweeper:
    """Runs the subscription renew/expire sweep on a fixed interval in the background."""

    def __init__(
        self,
        interval_seconds: Optional[int] = None,
        session_factory=SessionLocal,
        email: Optional[EmailService] = None
    ):
        self.interval_seconds = interval_seconds or settings.subscriptions.sweep_interval_seconds
        self.session_factory = session_factory
        self.email = email or email_service
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> Dict[str, Any]:
        """Run one sweep in its own session."""
        db = self.session_factory()
        try:
            return SubscriptionService(db, self.email).run_sweep()
        finally:
            db.close()

    async def _loop(self) -> None:
        while True:
            try:
                result = await asyncio.to_thread(self.run_once)
                logger.debug(f"Subscription sweep finished: {result}")
            except Exception as e:
                logger.exception(f"Subscription sweep failed: {e}")
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Subscription sweeper started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Subscription sweeper stopped")

# ------------------------------ END OF FILE ------------------------------
