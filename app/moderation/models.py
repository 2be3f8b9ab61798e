from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from app.moderation.domain.enums import (
    AccountStatus,
    EnforcementAction,
    ModerationAction,
    ModerationSource,
    ReviewPriority,
    ViolationCategory,
)
from app.moderation.domain.results import AccountStanding
from app.moderation.domain.rules import ViolationRule
from app.moderation.exceptions import ImmutableAuditRecordError, InvalidRuleError
from app.utils.models import BaseModel


class EnforcementConfig(BaseModel):
    """
    Estado de punições de um usuário. Só é alterado pelo EnforcementService,
    sempre sob ``select_for_update``.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="enforcement", verbose_name="Usuário"
    )
    reputation_score = models.PositiveSmallIntegerField(
        "Reputação", default=100, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    warning_count = models.PositiveIntegerField("Advertências", default=0)
    status = models.CharField(
        "Status", max_length=20, choices=AccountStatus.choices, default=AccountStatus.ACTIVE, db_index=True
    )
    suspended_until = models.DateTimeField("Suspenso até", null=True, blank=True, db_index=True)
    last_violation_at = models.DateTimeField("Última violação", null=True, blank=True)
    last_suspended_at = models.DateTimeField("Última suspensão", null=True, blank=True)
    last_recovered_at = models.DateTimeField("Última recuperação", null=True, blank=True)

    class Meta:
        verbose_name = "Situação do Usuário"
        verbose_name_plural = "Situações dos Usuários"
        indexes = [
            models.Index(fields=["status", "suspended_until"], name="moderation_ec_status_idx"),
        ]

    def __str__(self):
        return f"{self.user}: {self.status} ({self.reputation_score})"

    def to_standing(self) -> AccountStanding:
        return AccountStanding(
            reputation_score=self.reputation_score,
            warning_count=self.warning_count,
            status=self.status,
            suspended_until=self.suspended_until,
            last_suspended_at=self.last_suspended_at,
            last_violation_at=self.last_violation_at,
            last_recovered_at=self.last_recovered_at,
        )


class AuditRecordQuerySet(models.QuerySet):
    def pending_review(self):
        """Registros que pedem revisão humana e ainda não receberam decisão, por prioridade."""
        return (
            self.filter(
                kind__in=[AuditRecord.Kind.MODERATION, AuditRecord.Kind.APPEAL],
                requires_human_review=True,
            )
            .exclude(children__kind=AuditRecord.Kind.REVIEW)
            # recurso já decidido também encerra o registro de origem
            .exclude(children__kind=AuditRecord.Kind.APPEAL, children__children__kind=AuditRecord.Kind.REVIEW)
            .order_by("-review_priority", "created_at")
        )

    def for_author(self, author_id):
        return self.filter(author_id=author_id)


class AuditRecord(BaseModel):
    """
    Trilha de auditoria append-only.

    Cada decisão (moderação, punição, revisão humana, recurso, reconciliação)
    gera um novo registro; correções apontam para o registro original via
    ``parent`` em vez de alterá-lo.
    """

    class Kind(models.TextChoices):
        MODERATION = "MODERATION", "Moderação"
        ENFORCEMENT = "ENFORCEMENT", "Punição"
        REVIEW = "REVIEW", "Revisão humana"
        APPEAL = "APPEAL", "Recurso"
        RECONCILIATION = "RECONCILIATION", "Reconciliação"

    kind = models.CharField("Tipo", max_length=20, choices=Kind.choices, default=Kind.MODERATION, db_index=True)
    parent = models.ForeignKey(
        "self", on_delete=models.PROTECT, null=True, blank=True, related_name="children", verbose_name="Registro de origem"
    )
    content = models.ForeignKey(
        "community.Content",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_records",
        verbose_name="Conteúdo",
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_records",
        verbose_name="Autor",
    )
    content_type = models.CharField("Tipo de conteúdo", max_length=20, blank=True, default="")

    action = models.CharField("Ação", max_length=20, choices=ModerationAction.choices, db_index=True)
    confidence = models.FloatField("Confiança", default=0.0, help_text="0.0 a 1.0")
    source = models.CharField("Fonte", max_length=30, choices=ModerationSource.choices, blank=True, default="")
    reason = models.TextField("Motivo", blank=True, default="")
    primary_category = models.CharField(
        "Categoria principal", max_length=30, choices=ViolationCategory.choices, blank=True, default="", db_index=True
    )
    primary_rule = models.CharField("Regra principal", max_length=100, blank=True, default="", db_index=True)
    categories = models.JSONField("Categorias", default=list)
    requires_human_review = models.BooleanField("Requer revisão humana", default=False, db_index=True)
    review_priority = models.PositiveSmallIntegerField(
        "Prioridade de revisão", choices=ReviewPriority.choices, default=ReviewPriority.LOW
    )
    suggested_account_action = models.CharField(
        "Ação sugerida", max_length=20, choices=EnforcementAction.choices, default=EnforcementAction.NONE
    )
    appealable = models.BooleanField("Passível de recurso", default=False)
    degraded = models.BooleanField("Modo degradado", default=False, db_index=True)
    provider = models.CharField("Provedor", max_length=50, blank=True, default="")

    enforcement_action = models.CharField(
        "Punição aplicada", max_length=20, choices=EnforcementAction.choices, blank=True, default=""
    )
    previous_status = models.CharField("Status anterior", max_length=20, blank=True, default="")
    new_status = models.CharField("Novo status", max_length=20, blank=True, default="")
    reputation_delta = models.SmallIntegerField("Variação de reputação", default=0)
    effective_until = models.DateTimeField("Vigente até", null=True, blank=True)

    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_records",
        verbose_name="Revisor",
    )
    notes = models.TextField("Observações", blank=True, default="")
    raw_payload = models.JSONField("Payload Bruto", default=dict, help_text="Veredicto completo")

    objects = AuditRecordQuerySet.as_manager()

    class Meta:
        verbose_name = "Registro de Auditoria"
        verbose_name_plural = "Registros de Auditoria"
        indexes = [
            models.Index(fields=["author", "created_at"], name="moderation_ar_author_idx"),
            models.Index(fields=["kind", "requires_human_review", "review_priority"], name="moderation_ar_queue_idx"),
            models.Index(fields=["action", "created_at"], name="moderation_ar_action_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.kind}: {self.action} ({self.primary_rule or '-'})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableAuditRecordError(f"AuditRecord {self.pk} é imutável")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableAuditRecordError(f"AuditRecord {self.pk} não pode ser removido")


class ViolationRuleRecord(BaseModel):
    """Regra de violação cadastrada por administradores; substitui o catálogo padrão."""

    rule_id = models.CharField("Identificador", max_length=100, unique=True)
    name = models.CharField("Nome", max_length=255)
    description = models.TextField("Descrição", blank=True, default="")
    category = models.CharField("Categoria", max_length=30, choices=ViolationCategory.choices)
    severity = models.PositiveSmallIntegerField(
        "Severidade", validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    base_confidence = models.FloatField(
        "Confiança base", validators=[MinValueValidator(0.0), MaxValueValidator(1.0)]
    )
    action = models.CharField("Ação", max_length=20, choices=ModerationAction.choices)
    patterns = models.JSONField("Padrões", default=list, blank=True)
    keywords = models.JSONField("Palavras-chave", default=list, blank=True)
    regex_patterns = models.JSONField("Expressões regulares", default=list, blank=True)
    applicable_content_types = models.JSONField("Tipos de conteúdo", default=list, blank=True)
    applicable_author_roles = models.JSONField("Papéis de autor", default=list, blank=True)
    applicable_community_visibility = models.JSONField("Visibilidade da comunidade", default=list, blank=True)
    auto_block = models.BooleanField("Bloqueio automático", default=False)
    requires_human_review = models.BooleanField("Requer revisão humana", default=False)
    enabled = models.BooleanField("Ativa", default=True, db_index=True)
    position = models.PositiveIntegerField("Ordem", default=0, help_text="Desempate entre regras de mesma severidade")

    class Meta:
        verbose_name = "Regra de Violação"
        verbose_name_plural = "Regras de Violação"
        ordering = ["position", "created_at"]

    def __str__(self):
        return f"{self.rule_id} (sev {self.severity})"

    def to_rule_dict(self) -> dict:
        return {
            "id": self.rule_id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "severity": self.severity,
            "base_confidence": self.base_confidence,
            "action": self.action,
            "patterns": self.patterns,
            "keywords": self.keywords,
            "regex_patterns": self.regex_patterns,
            "applicable_content_types": self.applicable_content_types,
            "applicable_author_roles": self.applicable_author_roles,
            "applicable_community_visibility": self.applicable_community_visibility,
            "auto_block": self.auto_block,
            "requires_human_review": self.requires_human_review,
            "enabled": self.enabled,
        }

    def clean(self):
        try:
            ViolationRule.from_dict(self.to_rule_dict())
        except InvalidRuleError as exc:
            raise ValidationError(exc.problem) from exc
