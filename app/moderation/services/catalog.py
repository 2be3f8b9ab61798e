import uuid

import structlog
from django.conf import settings
from django.core.cache import cache
from django.db.models import Count

from app.moderation.domain.catalog import RuleCatalog
from app.moderation.domain.default_rules import DEFAULT_RULES
from app.moderation.exceptions import InvalidRuleError
from app.moderation.models import AuditRecord, ViolationRuleRecord

logger = structlog.get_logger(__name__)


class RuleCatalogService:
    """
    Carrega o catálogo de regras a partir do banco, com cache.

    Sem nenhuma regra cadastrada, o catálogo padrão é usado. O cache é
    invalidado pelos receivers de ``post_save``/``post_delete`` de
    ``ViolationRuleRecord``, o que dá o hot-reload sem reiniciar workers.
    """

    @staticmethod
    def _cache_key() -> str:
        return settings.MODERATION_RULES_CACHE_KEY

    @staticmethod
    def _load_records() -> list[dict]:
        records = [record.to_rule_dict() for record in ViolationRuleRecord.objects.order_by("position", "created_at")]
        if not records:
            logger.debug("rule_catalog_using_defaults")
            return DEFAULT_RULES
        return records

    @staticmethod
    def get_catalog() -> RuleCatalog:
        """
        Returns:
            RuleCatalog validado

        Raises:
            InvalidRuleError: se alguma regra cadastrada estiver malformada
        """
        records = cache.get(RuleCatalogService._cache_key())
        if records is None:
            records = RuleCatalogService._load_records()
            cache.set(RuleCatalogService._cache_key(), records, timeout=settings.MODERATION_RULES_CACHE_TIMEOUT)

        try:
            return RuleCatalog.from_dicts(records)
        except InvalidRuleError as exc:
            logger.error("rule_catalog_invalid", rule_id=exc.rule_id, problem=exc.problem, alert=True)
            raise

    @staticmethod
    def _version_key() -> str:
        return f"{settings.MODERATION_RULES_CACHE_KEY}:version"

    @staticmethod
    def version() -> str:
        """Identificador do catálogo em uso; muda a cada ``invalidate``. Entra na chave do cache de veredictos."""
        return cache.get_or_set(RuleCatalogService._version_key(), lambda: uuid.uuid4().hex, timeout=None)

    @staticmethod
    def invalidate() -> None:
        cache.delete(RuleCatalogService._cache_key())
        cache.set(RuleCatalogService._version_key(), uuid.uuid4().hex, timeout=None)
        logger.info("rule_catalog_invalidated")

    @staticmethod
    def seed_defaults() -> int:
        """Copia o catálogo padrão para o banco; regras já cadastradas não são alteradas."""
        created = 0
        for position, rule in enumerate(DEFAULT_RULES):
            _, was_created = ViolationRuleRecord.objects.get_or_create(
                rule_id=rule["id"],
                defaults={
                    "name": rule["name"],
                    "description": rule.get("description", ""),
                    "category": rule["category"],
                    "severity": rule["severity"],
                    "base_confidence": rule["base_confidence"],
                    "action": rule["action"],
                    "patterns": list(rule.get("patterns", [])),
                    "keywords": list(rule.get("keywords", [])),
                    "regex_patterns": list(rule.get("regex_patterns", [])),
                    "applicable_content_types": [str(v) for v in rule.get("applicable_content_types", [])],
                    "applicable_author_roles": [str(v) for v in rule.get("applicable_author_roles", [])],
                    "applicable_community_visibility": [
                        str(v) for v in rule.get("applicable_community_visibility", [])
                    ],
                    "auto_block": rule.get("auto_block", False),
                    "requires_human_review": rule.get("requires_human_review", False),
                    "position": position,
                },
            )
            created += int(was_created)
        return created

    @staticmethod
    def rule_stats() -> list[dict]:
        """Quantas vezes cada regra do catálogo foi a violação principal de uma moderação."""
        counts = {
            row["primary_rule"]: row["total"]
            for row in AuditRecord.objects.filter(kind=AuditRecord.Kind.MODERATION)
            .exclude(primary_rule="")
            .values("primary_rule")
            .annotate(total=Count("id"))
        }
        return [
            {
                "rule_id": rule.id,
                "name": rule.name,
                "severity": rule.severity,
                "enabled": rule.enabled,
                "fired_count": counts.get(rule.id, 0),
            }
            for rule in RuleCatalogService.get_catalog()
        ]
