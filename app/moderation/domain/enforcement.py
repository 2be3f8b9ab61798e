"""
Política de punições: converte um veredicto e o histórico do usuário em uma
ação sobre a conta.

Máquina de estados::

    ACTIVE -> SUSPENDED -> ACTIVE (expiração)
    ACTIVE/SUSPENDED -> BANNED (terminal)

Todas as funções aqui são puras. Persistência, lock e retry ficam em
``app.moderation.services.enforcement``.
"""

from dataclasses import replace
from datetime import datetime, timedelta

from app.moderation.domain.enums import AccountStatus, EnforcementAction
from app.moderation.domain.results import AccountStanding, EnforcementResult, ModerationResult

MAX_REPUTATION = 100
PENALTY_PER_SEVERITY = 5
SUSPENSION_DURATION = timedelta(days=3)
REPEAT_SUSPENSION_WINDOW = timedelta(days=30)
RECOVERY_PERIOD = timedelta(days=30)
RECOVERY_POINTS = 5


def _ladder(severity: int, reputation: int, warnings: int, recently_suspended: bool) -> EnforcementAction:
    """Escada de escalonamento avaliada de cima para baixo; a primeira regra vence."""
    if reputation >= 50 and warnings <= 2 and severity <= 3:
        return EnforcementAction.WARN
    if severity >= 4 or (reputation < 50 and warnings >= 3):
        return EnforcementAction.BAN if recently_suspended else EnforcementAction.SUSPEND_3D
    if reputation < 25 or warnings >= 6:
        return EnforcementAction.BAN
    return EnforcementAction.WARN


def penalized_reputation(reputation: int, severity: int) -> int:
    return max(0, reputation - severity * PENALTY_PER_SEVERITY)


def select_action(severity: int, standing: AccountStanding, now: datetime) -> EnforcementAction:
    """
    Ação para uma violação de ``severity`` dado o histórico atual.

    A escada pura não é monotônica (uma severidade menor pode derrubar a
    reputação abaixo de 25 sem passar pela regra de suspensão), então a ação
    final é a mais grave entre todas as severidades de 1 até ``severity``.
    """
    recently_suspended = bool(
        standing.last_suspended_at and now - standing.last_suspended_at <= REPEAT_SUSPENSION_WINDOW
    )

    return max(
        (
            _ladder(
                s,
                penalized_reputation(standing.reputation_score, s),
                standing.warning_count,
                recently_suspended,
            )
            for s in range(1, severity + 1)
        ),
        key=lambda action: action.rank,
    )


def is_suspension_expired(standing: AccountStanding, now: datetime) -> bool:
    return (
        standing.status == AccountStatus.SUSPENDED
        and standing.suspended_until is not None
        and standing.suspended_until <= now
    )


class EnforcementEngine:
    """Decide a punição; não grava nada."""

    def decide(self, verdict: ModerationResult, standing: AccountStanding, now: datetime) -> EnforcementResult:
        unchanged = EnforcementResult(
            action_taken=EnforcementAction.NONE,
            previous_status=standing.status,
            new_status=standing.status,
            reputation_delta=0,
            previous_reputation=standing.reputation_score,
            new_reputation=standing.reputation_score,
            warning_count=standing.warning_count,
            effective_until=standing.suspended_until,
        )

        if verdict.is_approved:
            return replace(unchanged, reason="Content approved")
        if standing.status == AccountStatus.BANNED:
            return replace(unchanged, reason="Account already banned")
        if verdict.severity < 1:
            return replace(unchanged, reason="No attributable violation")

        severity = verdict.severity
        new_reputation = penalized_reputation(standing.reputation_score, severity)
        action = select_action(severity, standing, now)

        status = standing.status
        warnings = standing.warning_count
        effective_until = standing.suspended_until

        if action == EnforcementAction.WARN:
            warnings += 1
            reason = f"Warning issued for a severity {severity} violation"
        elif action == EnforcementAction.SUSPEND_3D:
            status = AccountStatus.SUSPENDED
            candidate = now + SUSPENSION_DURATION
            effective_until = max(candidate, standing.suspended_until) if standing.suspended_until else candidate
            reason = f"Account suspended for a severity {severity} violation"
        else:
            status = AccountStatus.BANNED
            effective_until = None
            reason = f"Account banned after a severity {severity} violation"

        return EnforcementResult(
            action_taken=action,
            previous_status=standing.status,
            new_status=status,
            reputation_delta=new_reputation - standing.reputation_score,
            previous_reputation=standing.reputation_score,
            new_reputation=new_reputation,
            warning_count=warnings,
            effective_until=effective_until,
            reason=reason,
        )


def recovery(standing: AccountStanding, now: datetime) -> tuple[int, datetime | None]:
    """
    Recuperação passiva: +5 de reputação a cada 30 dias completos sem violação,
    limitada a 100.

    Retorna ``(pontos, novo_marco)``. O marco avança apenas pelos períodos
    completos, então rodar o job várias vezes no mesmo período não soma pontos.
    """
    if standing.status == AccountStatus.BANNED or standing.reputation_score >= MAX_REPUTATION:
        return 0, None

    anchors = [d for d in (standing.last_violation_at, standing.last_recovered_at) if d]
    if not anchors:
        return 0, None

    anchor = max(anchors)
    periods = (now - anchor) // RECOVERY_PERIOD
    if periods < 1:
        return 0, None

    points = min(MAX_REPUTATION - standing.reputation_score, periods * RECOVERY_POINTS)
    return points, anchor + periods * RECOVERY_PERIOD
