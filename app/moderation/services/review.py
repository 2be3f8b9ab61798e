import structlog
from django.db import transaction

from app.community.models import Content
from app.community.services.broadcast_service import BroadcastService
from app.moderation.domain.enums import ModerationAction, ReviewPriority
from app.moderation.domain.results import ModerationResult
from app.moderation.exceptions import ReviewStateError
from app.moderation.models import AuditRecord
from app.moderation.services.audit import AuditLogger
from app.moderation.services.enforcement import EnforcementService
from app.moderation.services.pipeline import status_for

logger = structlog.get_logger(__name__)

UPHOLD = "UPHOLD"
OVERTURN = "OVERTURN"


class ReviewService:
    """Fila de revisão humana e recursos. Toda decisão vira um novo AuditRecord."""

    @staticmethod
    def queue():
        return AuditRecord.objects.pending_review().select_related("content", "author")

    @staticmethod
    def _origin(record: AuditRecord) -> AuditRecord:
        """Registro de moderação original (o recurso aponta para ele via parent)."""
        return record.parent if record.kind == AuditRecord.Kind.APPEAL else record

    @staticmethod
    def upheld_status(verdict: ModerationResult) -> str:
        """
        Status mantido pela revisão. O que dependia de revisão humana sai do
        ar; sinalizado sem revisão continua visível, como no veredicto original.
        """
        if verdict.requires_human_review:
            return Content.Status.BLOCKED
        return status_for(verdict)

    @staticmethod
    def resolve(record_id, reviewer, decision: str, notes: str = "") -> AuditRecord:
        """
        Registra a decisão de um revisor.

        Args:
            record_id: Registro MODERATION ou APPEAL na fila
            reviewer: Usuário administrador
            decision: ``UPHOLD`` mantém o veredicto; ``OVERTURN`` aprova o conteúdo
            notes: Observações do revisor

        Returns:
            AuditRecord do tipo REVIEW

        Raises:
            ReviewStateError: se o registro não está pendente de revisão
        """
        if decision not in (UPHOLD, OVERTURN):
            raise ReviewStateError(f"Decisão desconhecida: {decision}")

        with transaction.atomic():
            record = AuditRecord.objects.select_for_update().get(id=record_id)
            if not AuditRecord.objects.pending_review().filter(id=record.id).exists():
                raise ReviewStateError("Registro não está pendente de revisão")

            origin = ReviewService._origin(record)
            penalty = origin.reputation_delta or sum(
                origin.children.filter(kind=AuditRecord.Kind.ENFORCEMENT).values_list("reputation_delta", flat=True)
            )
            verdict = ModerationResult.from_dict(origin.raw_payload["verdict"])
            overturned = decision == OVERTURN

            content = None
            if origin.content_id:
                content = Content.objects.select_for_update().get(id=origin.content_id)
                content.status = Content.Status.APPROVED if overturned else ReviewService.upheld_status(verdict)
                content.save(update_fields=["status", "updated_at"])

            review_verdict = ModerationResult(
                action=ModerationAction.APPROVED if overturned else verdict.action,
                confidence=verdict.confidence,
                reason=f"Review {decision.lower()}: {verdict.reason}",
                source=verdict.source,
                categories=verdict.categories,
                review_priority=verdict.review_priority,
                suggested_account_action=verdict.suggested_account_action,
                degraded=verdict.degraded,
            )
            review = AuditLogger.persist(
                AuditLogger.build_fields(
                    review_verdict,
                    kind=AuditRecord.Kind.REVIEW,
                    content=content,
                    author_id=origin.author_id,
                    parent_id=record.id,
                    reviewer_id=reviewer.id,
                    notes=notes,
                )
            )

        if overturned and origin.author_id and penalty < 0:
            EnforcementService.restore_reputation(origin.author_id, -penalty)

        if content is not None:
            if overturned:
                BroadcastService.broadcast_content(content)
            elif content.status == Content.Status.BLOCKED:
                BroadcastService.notify_author_blocked(content, verdict.reason)

        logger.info("review_resolved", record_id=str(record.id), decision=decision, reviewer_id=str(reviewer.id))
        return review

    @staticmethod
    def appeal(record_id, user, reason: str) -> AuditRecord:
        """
        Abre um recurso do autor contra um veredicto.

        Raises:
            ReviewStateError: se o registro não é apelável, não pertence ao
                usuário ou já tem recurso aberto
        """
        with transaction.atomic():
            record = AuditRecord.objects.select_for_update().get(id=record_id)

            if record.kind != AuditRecord.Kind.MODERATION or not record.appealable:
                raise ReviewStateError("Este registro não aceita recurso")
            if record.author_id != user.id:
                raise ReviewStateError("Apenas o autor pode recorrer")
            if record.children.filter(kind=AuditRecord.Kind.APPEAL).exists():
                raise ReviewStateError("Já existe um recurso para este registro")

            verdict = ModerationResult.from_dict(record.raw_payload["verdict"])
            appeal_verdict = ModerationResult(
                action=verdict.action,
                confidence=verdict.confidence,
                reason=verdict.reason,
                source=verdict.source,
                categories=verdict.categories,
                requires_human_review=True,
                review_priority=max(verdict.review_priority, ReviewPriority.MEDIUM),
                suggested_account_action=verdict.suggested_account_action,
                degraded=verdict.degraded,
            )
            appeal = AuditLogger.persist(
                AuditLogger.build_fields(
                    appeal_verdict,
                    kind=AuditRecord.Kind.APPEAL,
                    content=record.content,
                    author_id=record.author_id,
                    parent_id=record.id,
                    notes=reason,
                )
            )

        logger.info("appeal_opened", record_id=str(record.id), appeal_id=str(appeal.id))
        return appeal
