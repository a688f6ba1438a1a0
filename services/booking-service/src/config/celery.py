# services/booking-service/src/config/celery.py
"""
Celery application for Booking Service.
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.base')

app = Celery('booking_service')

app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
