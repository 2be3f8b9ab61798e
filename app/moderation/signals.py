from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from app.moderation.models import ViolationRuleRecord
from app.moderation.services.catalog import RuleCatalogService


@receiver([post_save, post_delete], sender=ViolationRuleRecord)
def reload_rule_catalog(sender, **kwargs):
    RuleCatalogService.invalidate()
