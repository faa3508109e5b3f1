import logging

from celery import shared_task
from django.db.models import F, Q
from django.utils import timezone

from kitchen.choices import RegistrationStatus
from .models import User

logger = logging.getLogger(__name__)


@shared_task
def advance_days_active():
    """
    Counts one more active day for every approved member whose plan has not
    expired. Run once a day via Celery Beat.
    """
    today = timezone.localdate()
    updated = User.objects.filter(
        role=User.Role.MEMBER,
        status=RegistrationStatus.APPROVED,
    ).filter(
        Q(expiry_date__isnull=True) | Q(expiry_date__gte=today)
    ).update(days_active=F('days_active') + 1)

    logger.info(f"Advanced days_active for {updated} members on {today}")
    return updated
