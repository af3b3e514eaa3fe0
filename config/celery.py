"""
Celery application for the Loan Settlement service.
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('loan_settlement')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
