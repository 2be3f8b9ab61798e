import structlog
from django.db import transaction

from app.community.models import Content
from app.community.services.broadcast_service import BroadcastService
from app.moderation.domain.results import BatchItem, EnforcementResult, ModerationContext, ModerationResult
from app.moderation.exceptions import EnforcementWriteError
from app.moderation.models import AuditRecord
from app.moderation.services.audit import AuditLogger
from app.moderation.services.enforcement import EnforcementService
from app.moderation.services.moderator import ModerationService, is_batch_error

logger = structlog.get_logger(__name__)


def context_for(content: Content) -> ModerationContext:
    return ModerationContext(
        content_type=content.content_type,
        author_role=content.author.role,
        community_visibility=content.community.visibility,
    )


def status_for(verdict: ModerationResult) -> str:
    """
    Status de exibição do conteúdo. Sinalizado sem revisão humana continua
    visível; o registro e a punição acontecem do mesmo jeito.
    """
    if verdict.is_blocked:
        return Content.Status.BLOCKED
    if not verdict.is_approved and verdict.requires_human_review:
        return Content.Status.UNDER_REVIEW
    return Content.Status.APPROVED


def notify(content: Content, verdict: ModerationResult, enforcement: EnforcementResult | None) -> None:
    if content.status == Content.Status.APPROVED:
        BroadcastService.broadcast_content(content)
    elif content.status == Content.Status.BLOCKED:
        BroadcastService.notify_author_blocked(content, verdict.reason)
    elif content.status == Content.Status.UNDER_REVIEW:
        BroadcastService.notify_author_under_review(content)

    if enforcement is not None and enforcement.changed_account:
        BroadcastService.notify_enforcement(content.author_id, enforcement.to_dict())


class ModerationPipeline:
    """
    moderar -> gravar status -> punir -> auditar -> notificar.

    O conteúdo é travado com ``select_for_update`` e só é processado enquanto
    estiver PENDING, então reexecuções (retry do Celery, reconciliação) não
    duplicam punições.
    """

    @staticmethod
    def process(content_id, verdict: ModerationResult | None = None) -> ModerationResult | None:
        """
        Args:
            content_id: UUID do Content
            verdict: Veredicto já calculado (lote); sem ele o conteúdo é moderado aqui

        Returns:
            ModerationResult, ou None quando o conteúdo já tinha sido moderado

        Raises:
            Content.DoesNotExist: se o conteúdo não existe
            InvalidRuleError: se o catálogo cadastrado estiver malformado
        """
        log = logger.bind(content_id=str(content_id))

        with transaction.atomic():
            content = Content.objects.select_for_update().select_related("community", "author").get(id=content_id)

            if content.status != Content.Status.PENDING:
                log.info("moderation_skipped", current_status=content.status)
                return None

            if verdict is None:
                verdict = ModerationService.moderate(content.body, context_for(content), content.author_id)
            content.status = status_for(verdict)
            content.save(update_fields=["status", "updated_at"])

        enforcement = None
        deferred = False
        if not verdict.is_approved:
            try:
                enforcement = EnforcementService.apply(content.author_id, verdict)
            except EnforcementWriteError as exc:
                log.error("enforcement_deferred", alert=True, error=str(exc))
                deferred = True

        record = AuditLogger.record(
            verdict,
            kind=AuditRecord.Kind.MODERATION,
            enforcement=enforcement,
            content=content,
            author_id=content.author_id,
            provider=ModerationService.provider_name(),
        )

        if deferred:
            from app.moderation.tasks import apply_enforcement_task

            apply_enforcement_task.delay(
                str(content.author_id), verdict.to_dict(), str(record.id) if record else None, str(content.id)
            )

        notify(content, verdict, enforcement)
        log.info("content_moderated", status=content.status, action=verdict.action)
        return verdict

    @staticmethod
    def process_batch(content_ids) -> dict[str, int]:
        """
        Modera em lote os conteúdos PENDING de ``content_ids``.

        Os veredictos saem de ``ModerationService.moderate_batch``; cada
        conteúdo ainda passa por ``process`` (lock, punição, auditoria). Item
        com ``BATCH_ERROR`` não é gravado nem punido: volta para a fila
        individual.

        Returns:
            Contagem de conteúdos moderados, ignorados e reenfileirados
        """
        from app.moderation.tasks import moderate_content_task

        contents = Content.objects.filter(id__in=content_ids, status=Content.Status.PENDING).select_related(
            "community", "author"
        )
        items = [
            BatchItem(
                id=str(content.id),
                content=content.body,
                context=context_for(content),
                author_id=str(content.author_id),
            )
            for content in contents
        ]
        verdicts = ModerationService.moderate_batch(items)

        summary = {"moderated": 0, "skipped": len(set(map(str, content_ids))) - len(items), "requeued": 0}
        for content_id, verdict in verdicts.items():
            if is_batch_error(verdict):
                moderate_content_task.delay(content_id)
                summary["requeued"] += 1
                continue

            try:
                result = ModerationPipeline.process(content_id, verdict)
            except Exception as exc:
                logger.warning("batch_item_requeued", content_id=content_id, error=str(exc))
                moderate_content_task.delay(content_id)
                summary["requeued"] += 1
                continue

            summary["skipped" if result is None else "moderated"] += 1

        logger.info("batch_pipeline_finished", **summary)
        return summary
