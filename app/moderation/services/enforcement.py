import random
import time
from datetime import datetime
from typing import Callable, TypeVar

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from app.moderation.domain.enforcement import EnforcementEngine, is_suspension_expired, recovery
from app.moderation.domain.enums import AccountStatus, EnforcementAction
from app.moderation.domain.results import EnforcementResult, ModerationResult
from app.moderation.exceptions import EnforcementWriteError
from app.moderation.models import EnforcementConfig

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class EnforcementService:
    """
    Único ponto de escrita do EnforcementConfig.

    Toda alteração acontece dentro de ``transaction.atomic`` com
    ``select_for_update`` na linha do usuário, então violações concorrentes do
    mesmo usuário são aplicadas em série.
    """

    @staticmethod
    def _with_retries(operation: Callable[[], T], user_id, log) -> T:
        """
        Executa ``operation`` com retry e backoff exponencial em erros de banco
        (lock, deadlock, conexão). O jitter evita que escritas concorrentes do
        mesmo usuário colidam de novo na tentativa seguinte.

        Raises:
            EnforcementWriteError: quando todas as tentativas falham
        """
        retries = settings.ENFORCEMENT_WRITE_RETRIES

        for attempt in range(1, retries + 1):
            try:
                return operation()
            except DatabaseError as exc:
                log.warning("enforcement_write_retry", attempt=attempt, error=str(exc))
                if attempt == retries:
                    raise EnforcementWriteError(f"Falha ao gravar punição de {user_id}") from exc
                delay = settings.ENFORCEMENT_RETRY_BACKOFF * 2 ** (attempt - 1)
                time.sleep(delay * random.uniform(1.0, 1.5))

        raise EnforcementWriteError(f"Nenhuma tentativa de escrita configurada para {user_id}")

    @staticmethod
    def _expire_if_due(user_id, now: datetime) -> EnforcementConfig:
        expired = EnforcementConfig.objects.filter(
            user_id=user_id, status=AccountStatus.SUSPENDED, suspended_until__lte=now
        ).update(status=AccountStatus.ACTIVE, suspended_until=None, updated_at=now)

        if expired:
            logger.info("suspension_expired", user_id=str(user_id), trigger="read")

        config, _ = EnforcementConfig.objects.get_or_create(user_id=user_id)
        return config

    @staticmethod
    def refresh_status(user_id, now: datetime | None = None) -> EnforcementConfig:
        """
        Leitura do status com expiração preguiçosa.

        O UPDATE condicional garante que a transição SUSPENDED -> ACTIVE
        acontece uma única vez, mesmo com leituras concorrentes: só uma delas
        encontra a linha ainda SUSPENDED.
        """
        now = now or timezone.now()
        log = logger.bind(user_id=str(user_id))
        return EnforcementService._with_retries(lambda: EnforcementService._expire_if_due(user_id, now), user_id, log)

    @staticmethod
    def expire_suspensions(now: datetime | None = None) -> int:
        """Varredura periódica: mesma transição da leitura, em lote."""
        now = now or timezone.now()
        expired = EnforcementConfig.objects.filter(
            status=AccountStatus.SUSPENDED, suspended_until__lte=now
        ).update(status=AccountStatus.ACTIVE, suspended_until=None, updated_at=now)

        logger.info("suspension_sweep_finished", expired=expired)
        return expired

    @staticmethod
    def _apply_locked(user_id, verdict: ModerationResult, now: datetime) -> EnforcementResult:
        with transaction.atomic():
            config, _ = EnforcementConfig.objects.select_for_update().get_or_create(user_id=user_id)

            if is_suspension_expired(config.to_standing(), now):
                config.status = AccountStatus.ACTIVE
                config.suspended_until = None

            result = EnforcementEngine().decide(verdict, config.to_standing(), now)

            if result.changed_account:
                config.reputation_score = result.new_reputation
                config.warning_count = result.warning_count
                config.status = result.new_status
                config.suspended_until = result.effective_until
                config.last_violation_at = now
                if result.action_taken == EnforcementAction.SUSPEND_3D:
                    config.last_suspended_at = now

            config.save()
            return result

    @staticmethod
    def apply(user_id, verdict: ModerationResult, now: datetime | None = None) -> EnforcementResult:
        """
        Aplica a punição decidida pelo EnforcementEngine.

        Args:
            user_id: Autor do conteúdo
            verdict: Veredicto da moderação
            now: Instante de referência (default: agora)

        Returns:
            EnforcementResult com a ação tomada e o novo estado da conta

        Raises:
            EnforcementWriteError: quando todas as tentativas inline falham
        """
        now = now or timezone.now()
        log = logger.bind(user_id=str(user_id), severity=verdict.severity)

        result = EnforcementService._with_retries(
            lambda: EnforcementService._apply_locked(user_id, verdict, now), user_id, log
        )

        log.info(
            "enforcement_applied",
            action=result.action_taken,
            new_status=result.new_status,
            reputation_delta=result.reputation_delta,
        )
        return result

    @staticmethod
    def restore_reputation(user_id, points: int) -> EnforcementConfig:
        """Devolve reputação após uma revisão que anula a violação. Não reverte status."""
        with transaction.atomic():
            config, _ = EnforcementConfig.objects.select_for_update().get_or_create(user_id=user_id)
            config.reputation_score = min(100, config.reputation_score + max(0, points))
            config.save(update_fields=["reputation_score", "updated_at"])

        logger.info("reputation_restored", user_id=str(user_id), points=points)
        return config

    @staticmethod
    def recover_reputation(now: datetime | None = None) -> int:
        """Recuperação passiva de reputação; retorna quantos usuários ganharam pontos."""
        now = now or timezone.now()
        candidates = (
            EnforcementConfig.objects.filter(reputation_score__lt=100)
            .exclude(status=AccountStatus.BANNED)
            .values_list("id", flat=True)
        )

        recovered = 0
        for config_id in candidates.iterator():
            with transaction.atomic():
                config = EnforcementConfig.objects.select_for_update().get(id=config_id)
                points, anchor = recovery(config.to_standing(), now)
                if not points:
                    continue

                config.reputation_score += points
                config.last_recovered_at = anchor
                config.save(update_fields=["reputation_score", "last_recovered_at", "updated_at"])
                recovered += 1

        logger.info("reputation_recovery_finished", recovered=recovered)
        return recovered
