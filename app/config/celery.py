"""
Celery configuration for the messaging service.

Celery delivers notifications in the background so that sending a message
or changing a group never waits on notification storage. Redis is both the
message broker and the result backend. Tasks are auto-discovered from all
installed Django apps (notifications.tasks).

Usage:
    from notifications.tasks import deliver_notification

    deliver_notification.delay(user.id, "direct_message", {"message_id": 7})

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
