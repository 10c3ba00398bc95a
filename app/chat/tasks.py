"""
Celery tasks for chat app.

This module defines async tasks for:
- Attachment cleanup after a message is deleted

Related files:
    - services.py: MessageService.delete_own_message schedules the cleanup

Usage:
    from chat.tasks import delete_attachment_file

    transaction.on_commit(lambda: delete_attachment_file.delay(name))
"""

import logging

from celery import shared_task
from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(OSError,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def delete_attachment_file(self, storage_name: str) -> bool:
    """
    Remove a deleted message's attachment from storage.

    Storage errors are retried with backoff. The message row is already
    gone, so a file that still cannot be removed is only logged.

    Args:
        storage_name: Name of the file in the default storage

    Returns:
        True if the file was removed, False if it was already missing
    """
    if not default_storage.exists(storage_name):
        logger.info(f"Attachment {storage_name} already removed")
        return False

    try:
        default_storage.delete(storage_name)
    except OSError as e:
        logger.warning(
            f"Failed to delete attachment {storage_name} "
            f"(attempt {self.request.retries + 1}): {e}"
        )
        raise

    logger.info(f"Deleted attachment {storage_name}")
    return True
