"""
Celery configuration for the messaging service.

Background work (attachment cleanup after a message is deleted) runs on
Celery workers so storage latency never blocks a request or socket event.
Redis is both the broker and the result backend.

Usage:
    from chat.tasks import delete_attachment_file

    delete_attachment_file.delay(storage_name)

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("recruit_messaging")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Picks up chat/tasks.py
app.autodiscover_tasks()
