"""
Background email delivery.

Jobs run on an APScheduler background scheduler so request handlers only pay
for the enqueue. A failed delivery is rescheduled with exponential backoff
until ``max_attempts`` is reached, then dropped and logged.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from .sender import SMTPMailer
from .templates import MailContent

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 2
DEFAULT_BACKOFF_SECONDS = 2.0


class EmailQueue:
    """Fire-and-forget email dispatcher with bounded retries."""

    def __init__(
        self,
        mailer: SMTPMailer,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        scheduler: Optional[BackgroundScheduler] = None
    ):
        self.mailer = mailer
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self.scheduler = scheduler or BackgroundScheduler(timezone=timezone.utc)

    def start(self):
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Email queue started")

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Email queue stopped")

    def enqueue(self, email: str, content: MailContent) -> str:
        """
        Schedule delivery of a message.

        Returns:
            The job id
        """
        job_id = uuid.uuid4().hex
        self._schedule(job_id, email, content, attempt=1)
        logger.info(f"Queued email job {job_id} '{content.subject}' for {email}")
        return job_id

    def _schedule(self, job_id: str, email: str, content: MailContent, attempt: int, delay: float = 0):
        run_date = datetime.now(timezone.utc) + timedelta(seconds=delay)
        self.scheduler.add_job(
            self.deliver,
            trigger="date",
            run_date=run_date,
            args=[job_id, email, content, attempt],
            id=f"{job_id}:{attempt}",
            name=f"send {content.subject} to {email}",
            misfire_grace_time=None,
        )

    def deliver(self, job_id: str, email: str, content: MailContent, attempt: int = 1) -> bool:
        """
        Run one delivery attempt.

        Returns:
            True if sent, False if the attempt failed (a retry may be scheduled)
        """
        logger.info(f"Processing email job {job_id} for {email} (attempt {attempt}/{self.max_attempts})")
        try:
            self.mailer.send(email, content)
        except Exception as e:
            if attempt < self.max_attempts:
                delay = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(f"Email job {job_id} failed for {email}: {e}; retrying in {delay}s")
                self._schedule(job_id, email, content, attempt + 1, delay)
            else:
                logger.error(f"Email job {job_id} failed for {email} after {attempt} attempts: {e}")
            return False

        logger.info(f"Email job {job_id} completed for {email}")
        return True
