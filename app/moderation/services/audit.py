import structlog
from django.db import DatabaseError, transaction
from django.utils.dateparse import parse_datetime

from app.moderation.domain.results import EnforcementResult, ModerationResult
from app.moderation.models import AuditRecord

logger = structlog.get_logger(__name__)


class AuditLogger:
    """
    Grava a trilha de decisões.

    Uma falha de escrita não impede o veredicto de chegar ao chamador: vira
    alerta operacional e a gravação é reenfileirada no Celery.
    """

    @staticmethod
    def build_fields(
        verdict: ModerationResult,
        *,
        kind: str = AuditRecord.Kind.MODERATION,
        enforcement: EnforcementResult | None = None,
        content=None,
        author_id=None,
        parent_id=None,
        reviewer_id=None,
        provider: str = "",
        notes: str = "",
    ) -> dict:
        """Campos serializáveis em JSON, prontos para ``create`` ou para a fila."""
        primary = verdict.primary
        fields = {
            "kind": str(kind),
            "content_id": str(content.id) if content is not None else None,
            "content_type": content.content_type if content is not None else "",
            "author_id": str(author_id) if author_id else None,
            "parent_id": str(parent_id) if parent_id else None,
            "reviewer_id": str(reviewer_id) if reviewer_id else None,
            "action": str(verdict.action),
            "confidence": verdict.confidence,
            "source": str(verdict.source),
            "reason": verdict.reason,
            "primary_category": primary.category if primary else "",
            "primary_rule": primary.rule_id if primary else "",
            "categories": verdict.to_dict()["categories"],
            "requires_human_review": verdict.requires_human_review,
            "review_priority": int(verdict.review_priority),
            "suggested_account_action": str(verdict.suggested_account_action),
            "appealable": verdict.appealable,
            "degraded": verdict.degraded,
            "provider": provider,
            "notes": notes,
            "raw_payload": {"verdict": verdict.to_dict()},
        }

        if enforcement is not None:
            fields.update(
                enforcement_action=str(enforcement.action_taken),
                previous_status=str(enforcement.previous_status),
                new_status=str(enforcement.new_status),
                reputation_delta=enforcement.reputation_delta,
                effective_until=enforcement.effective_until.isoformat() if enforcement.effective_until else None,
            )
            fields["raw_payload"]["enforcement"] = enforcement.to_dict()

        return fields

    @staticmethod
    def persist(fields: dict) -> AuditRecord:
        fields = dict(fields)
        if fields.get("effective_until"):
            fields["effective_until"] = parse_datetime(fields["effective_until"])
        return AuditRecord.objects.create(**fields)

    @staticmethod
    def record(verdict: ModerationResult, **kwargs) -> AuditRecord | None:
        """
        Grava um registro de auditoria.

        Args:
            verdict: Veredicto a registrar
            **kwargs: Ver ``build_fields`` (kind, enforcement, content, author_id...)

        Returns:
            AuditRecord gravado, ou None quando a gravação foi reenfileirada
        """
        fields = AuditLogger.build_fields(verdict, **kwargs)
        log = logger.bind(kind=fields["kind"], content_id=fields["content_id"], author_id=fields["author_id"])

        try:
            with transaction.atomic():
                record = AuditLogger.persist(fields)
        except DatabaseError as exc:
            log.error("audit_write_failed", alert=True, error=str(exc))

            from app.moderation.tasks import persist_audit_record_task

            persist_audit_record_task.delay(fields)
            return None

        log.info("audit_recorded", record_id=str(record.id), action=record.action)
        return record
