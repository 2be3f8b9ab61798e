import uuid
from datetime import timedelta

import structlog
from celery import shared_task
from celery.exceptions import SoftTimeLimitExceeded
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from app.community.models import Content
from app.community.services.broadcast_service import BroadcastService
from app.moderation.domain.enums import ModerationAction
from app.moderation.domain.results import ModerationResult
from app.moderation.exceptions import EnforcementWriteError
from app.moderation.models import AuditRecord
from app.moderation.services.audit import AuditLogger
from app.moderation.services.enforcement import EnforcementService
from app.moderation.services.moderator import ModerationService
from app.moderation.services.pipeline import ModerationPipeline, context_for, notify, status_for

logger = structlog.get_logger(__name__)

RECONCILIATION_LOOKBACK = timedelta(days=1)
RECONCILIATION_BATCH = 100
PENDING_SWEEP_LIMIT = 100


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(Exception,),
    retry_backoff=True,
    task_time_limit=300,
    task_soft_time_limit=290,
    acks_late=True,
)
def moderate_content_task(self, content_id: str) -> dict:
    """
    Modera um conteúdo que ficou PENDING porque a moderação síncrona falhou.

    Combina 'acks_late=True' (Garantia de Entrega) com o 'select_for_update'
    do pipeline (Garantia de Idempotência): conteúdo que não está mais PENDING
    é ignorado.
    """
    log = logger.bind(content_id=content_id, task_id=self.request.id)
    try:
        verdict = ModerationPipeline.process(uuid.UUID(content_id))

        if verdict is None:
            return {"status": "skipped", "reason": "Content already moderated", "content_id": content_id}

        return {
            "status": "success",
            "action": verdict.action,
            "degraded": verdict.degraded,
            "content_id": content_id,
        }

    except Content.DoesNotExist:
        log.error("content_not_found")
        return {"status": "error", "reason": "Content not found", "content_id": content_id}
    except SoftTimeLimitExceeded:
        logger.warning("moderation_timeout_soft", content_id=content_id, retry=self.request.retries)
        raise self.retry(exc=SoftTimeLimitExceeded("Timeout de moderação atingido"))
    except Exception as exc:
        log.exception("moderation_task_failed", retry_count=self.request.retries)
        raise self.retry(exc=exc)


@shared_task(
    bind=True,
    max_retries=5,
    autoretry_for=(DatabaseError, EnforcementWriteError),
    retry_backoff=True,
    retry_backoff_max=600,
    acks_late=True,
)
def apply_enforcement_task(
    self, user_id: str, verdict: dict, parent_record_id: str | None = None, content_id: str | None = None
) -> dict:
    """Punição que não pôde ser gravada inline; o resultado vira um registro ENFORCEMENT."""
    log = logger.bind(user_id=user_id, task_id=self.request.id, retry=self.request.retries)
    result = ModerationResult.from_dict(verdict)

    enforcement = EnforcementService.apply(uuid.UUID(user_id), result)

    content = Content.objects.filter(id=content_id).first() if content_id else None
    AuditLogger.record(
        result,
        kind=AuditRecord.Kind.ENFORCEMENT,
        enforcement=enforcement,
        content=content,
        author_id=user_id,
        parent_id=parent_record_id,
    )

    if enforcement.changed_account:
        BroadcastService.notify_enforcement(user_id, enforcement.to_dict())

    log.info("deferred_enforcement_applied", action=enforcement.action_taken)
    return {"status": "success", "action": enforcement.action_taken, "user_id": user_id}


@shared_task(
    bind=True,
    max_retries=10,
    autoretry_for=(DatabaseError,),
    retry_backoff=True,
    retry_backoff_max=900,
    acks_late=True,
)
def persist_audit_record_task(self, fields: dict) -> dict:
    """Regrava um registro de auditoria cuja escrita síncrona falhou."""
    record = AuditLogger.persist(fields)
    logger.info("audit_record_recovered", record_id=str(record.id), retry=self.request.retries)
    return {"status": "success", "record_id": str(record.id)}


@shared_task(
    bind=True,
    max_retries=3,
    autoretry_for=(DatabaseError,),
    retry_backoff=True,
    task_time_limit=600,
    task_soft_time_limit=590,
    acks_late=True,
)
def moderate_batch_task(self, content_ids: list[str]) -> dict:
    """
    Modera vários conteúdos PENDING de uma vez (importação, reprocessamento).
    Itens que falham no lote são reenfileirados em ``moderate_content_task``.
    """
    summary = ModerationPipeline.process_batch([uuid.UUID(content_id) for content_id in content_ids])
    logger.info("batch_task_finished", task_id=self.request.id, **summary)
    return {"status": "success", **summary}


@shared_task
def moderate_stale_pending_task() -> dict:
    """Varredura de conteúdos que ficaram PENDING além do prazo (task individual perdida)."""
    cutoff = timezone.now() - timedelta(seconds=settings.MODERATION_PENDING_GRACE)
    content_ids = list(
        Content.objects.filter(status=Content.Status.PENDING, created_at__lte=cutoff)
        .order_by("created_at")
        .values_list("id", flat=True)[:PENDING_SWEEP_LIMIT]
    )
    if not content_ids:
        return {"status": "success", "moderated": 0, "skipped": 0, "requeued": 0}

    return {"status": "success", **ModerationPipeline.process_batch(content_ids)}


@shared_task
def expire_suspensions_task() -> dict:
    return {"expired": EnforcementService.expire_suspensions()}


@shared_task
def recover_reputation_task() -> dict:
    return {"recovered": EnforcementService.recover_reputation()}


@shared_task(bind=True, acks_late=True)
def reconcile_degraded_records_task(self) -> dict:
    """
    Reexecuta a moderação de registros compostos sem o classificador externo.

    O resultado é anexado como registro RECONCILIATION. Só um veredicto
    degradado que aprovou e agora viola muda o conteúdo e gera punição.
    """
    since = timezone.now() - RECONCILIATION_LOOKBACK
    records = (
        AuditRecord.objects.filter(kind=AuditRecord.Kind.MODERATION, degraded=True, created_at__gte=since)
        .exclude(children__kind=AuditRecord.Kind.RECONCILIATION)
        .exclude(content__isnull=True)
        .select_related("content__community", "content__author")
        .order_by("created_at")[:RECONCILIATION_BATCH]
    )

    reconciled = escalated = 0
    for record in records:
        log = logger.bind(record_id=str(record.id), task_id=self.request.id)
        content = record.content
        verdict = ModerationService.moderate(content.body, context_for(content), content.author_id)

        if verdict.degraded:
            log.info("reconciliation_still_degraded")
            continue

        enforcement = None
        if record.action == ModerationAction.APPROVED and not verdict.is_approved:
            with transaction.atomic():
                content = Content.objects.select_for_update().select_related("community", "author").get(id=content.id)
                content.status = status_for(verdict)
                content.save(update_fields=["status", "updated_at"])

            enforcement = EnforcementService.apply(content.author_id, verdict)
            if content.status != Content.Status.APPROVED:
                notify(content, verdict, enforcement)
            elif enforcement.changed_account:
                BroadcastService.notify_enforcement(content.author_id, enforcement.to_dict())
            escalated += 1

        AuditLogger.record(
            verdict,
            kind=AuditRecord.Kind.RECONCILIATION,
            enforcement=enforcement,
            content=content,
            author_id=content.author_id,
            parent_id=record.id,
            provider=ModerationService.provider_name(),
        )
        reconciled += 1
        log.info("record_reconciled", previous_action=record.action, action=verdict.action)

    return {"reconciled": reconciled, "escalated": escalated}
