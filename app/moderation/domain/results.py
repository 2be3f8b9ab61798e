from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from app.moderation.domain.enums import (
    AccountStatus,
    EnforcementAction,
    ModerationAction,
    ModerationSource,
    ReviewPriority,
)


@dataclass(frozen=True)
class ModerationContext:
    content_type: str
    author_role: str
    community_visibility: str


@dataclass(frozen=True)
class BatchItem:
    id: str
    content: str
    context: ModerationContext
    author_id: str | None = None


@dataclass(frozen=True)
class RuleMatch:
    """
    Uma violação disparada, seja por regra customizada ou por categoria do
    classificador externo. As duas fontes compartilham este formato para que
    o compositor tenha um único algoritmo de merge.
    """

    rule_id: str
    name: str
    category: str
    description: str
    severity: int
    confidence: float
    base_confidence: float
    action: str
    source: str
    auto_block: bool = False
    requires_human_review: bool = False
    matches: tuple[str, ...] = ()
    order: int = 0


MatchSet = tuple[RuleMatch, ...]


@dataclass(frozen=True)
class PositiveSignal:
    is_on_topic: bool
    confidence_bonus: float
    indicators: tuple[str, ...] = ()


@dataclass(frozen=True)
class CategorySummary:
    rule_id: str
    name: str
    category: str
    severity: int
    confidence: float
    description: str
    source: str
    matches: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModerationResult:
    """Veredicto de uma submissão. Criado uma vez e registrado na auditoria."""

    action: str
    confidence: float
    reason: str
    source: str
    categories: tuple[CategorySummary, ...] = ()
    requires_human_review: bool = False
    review_priority: int = ReviewPriority.LOW
    suggested_account_action: str = EnforcementAction.NONE
    appealable: bool = False
    degraded: bool = False

    @property
    def primary(self) -> CategorySummary | None:
        return self.categories[0] if self.categories else None

    @property
    def severity(self) -> int:
        return self.primary.severity if self.primary else 0

    @property
    def is_approved(self) -> bool:
        return self.action == ModerationAction.APPROVED

    @property
    def is_blocked(self) -> bool:
        return self.action == ModerationAction.BLOCKED

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["review_priority"] = ReviewPriority(self.review_priority).name
        data["categories"] = [asdict(c) | {"matches": list(c.matches)} for c in self.categories]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModerationResult":
        """Inverso de ``to_dict``; usado quando o veredicto atravessa a fila do Celery."""
        priority = data.get("review_priority", ReviewPriority.LOW)
        if isinstance(priority, str):
            priority = ReviewPriority[priority]

        return cls(
            action=data["action"],
            confidence=data["confidence"],
            reason=data.get("reason", ""),
            source=data.get("source", ModerationSource.COMBINED),
            categories=tuple(
                CategorySummary(**(c | {"matches": tuple(c.get("matches", ()))})) for c in data.get("categories", ())
            ),
            requires_human_review=data.get("requires_human_review", False),
            review_priority=int(priority),
            suggested_account_action=data.get("suggested_account_action", EnforcementAction.NONE),
            appealable=data.get("appealable", False),
            degraded=data.get("degraded", False),
        )

    @classmethod
    def approved(cls, reason: str, source: str = ModerationSource.COMBINED, degraded: bool = False):
        return cls(
            action=ModerationAction.APPROVED,
            confidence=0.0,
            reason=reason,
            source=str(source),
            degraded=degraded,
        )


@dataclass(frozen=True)
class AccountStanding:
    """Fotografia do EnforcementConfig usada pelo motor de punições."""

    reputation_score: int = 100
    warning_count: int = 0
    status: str = AccountStatus.ACTIVE
    suspended_until: datetime | None = None
    last_suspended_at: datetime | None = None
    last_violation_at: datetime | None = None
    last_recovered_at: datetime | None = None


@dataclass(frozen=True)
class EnforcementResult:
    action_taken: str
    previous_status: str
    new_status: str
    reputation_delta: int
    previous_reputation: int
    new_reputation: int
    warning_count: int
    effective_until: datetime | None = None
    reason: str = ""

    @property
    def changed_account(self) -> bool:
        return self.action_taken != EnforcementAction.NONE

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["effective_until"] = self.effective_until.isoformat() if self.effective_until else None
        return data
