import logging

import requests
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(requests.RequestException,),
    retry_backoff=True,
    retry_jitter=False,
    max_retries=3,
)
def deliver_notification_task(self, url: str, body: dict, timeout: float = 5.0) -> int:
    """POST a notification body to the webhook; retried with backoff on failure."""
    resp = requests.post(url, json=body, timeout=timeout)
    resp.raise_for_status()
    logger.info("Notification delivered (%s)", resp.status_code)
    return resp.status_code
