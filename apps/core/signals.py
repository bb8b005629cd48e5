# apps/core/signals.py

import logging

from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from .models import Task, TeamMember

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Task)
def stamp_completion(sender, instance, **kwargs):
    """
    Keeps completed_at in step with the status
    Set when a task enters DONE, cleared when it leaves
    """
    previous_status = None
    if instance.pk:
        previous_status = (
            sender.objects.filter(pk=instance.pk).values_list('status', flat=True).first()
        )
    instance.sync_completion(previous_status)


@receiver(post_save, sender=TeamMember)
def log_membership_created(sender, instance, created, **kwargs):
    if created:
        logger.info(f"[MEMBERSHIP] user {instance.user_id} joined team {instance.team_id} as {instance.role}")


@receiver(post_delete, sender=TeamMember)
def log_membership_removed(sender, instance, **kwargs):
    logger.info(f"[MEMBERSHIP] user {instance.user_id} left team {instance.team_id}")
