import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'kerala_kitchen.settings')

app = Celery('kerala_kitchen')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

# Celery Beat schedule
app.conf.beat_schedule = {
    'advance-days-active-daily': {
        'task': 'accounts.tasks.advance_days_active',
        'schedule': crontab(hour=0, minute=5),  # just after local midnight
    },
}
