from app.moderation.domain.enums import (
    EnforcementAction,
    ModerationAction,
    ModerationSource,
    ReviewPriority,
)
from app.moderation.domain.external import external_matches
from app.moderation.domain.results import (
    CategorySummary,
    MatchSet,
    ModerationResult,
    PositiveSignal,
    RuleMatch,
)
from app.moderation.domain.strategies import ClassifierResult

DEFAULT_CLASSIFIER_THRESHOLD = 0.7

_NO_SIGNAL = PositiveSignal(is_on_topic=False, confidence_bonus=0.0)


def _precedence(match: RuleMatch) -> tuple:
    is_external = match.source == ModerationSource.EXTERNAL_CLASSIFIER
    return (-match.severity, -match.confidence, is_external, match.order)


def _review_priority(max_severity: int) -> int:
    if max_severity >= 4:
        return ReviewPriority.HIGH
    if max_severity == 3:
        return ReviewPriority.MEDIUM
    return ReviewPriority.LOW


def _summary(match: RuleMatch) -> CategorySummary:
    return CategorySummary(
        rule_id=match.rule_id,
        name=match.name,
        category=match.category,
        severity=match.severity,
        confidence=match.confidence,
        description=match.description,
        source=match.source,
        matches=match.matches,
    )


class VerdictComposer:
    """
    Junta as violações das regras customizadas com as do classificador externo
    em um único ModerationResult.

    ``external=None`` significa que o classificador não respondeu (erro ou
    timeout): o veredicto sai só com as regras customizadas e ``degraded=True``.
    """

    def __init__(self, classifier_threshold: float = DEFAULT_CLASSIFIER_THRESHOLD):
        self.classifier_threshold = classifier_threshold

    def compose(
        self,
        match_set: MatchSet,
        external: ClassifierResult | None,
        positive: PositiveSignal | None = None,
    ) -> ModerationResult:
        positive = positive or _NO_SIGNAL
        degraded = external is None
        synthetic = external_matches(external, self.classifier_threshold)
        fired = sorted((*match_set, *synthetic), key=_precedence)

        if not fired:
            return ModerationResult.approved(
                reason="Content approved",
                source=ModerationSource.CUSTOM_RULES if degraded else ModerationSource.COMBINED,
                degraded=degraded,
            )

        primary = fired[0]
        floor = min(primary.confidence, primary.base_confidence)
        confidence = max(primary.confidence - positive.confidence_bonus, floor)
        confidence = round(max(0.0, min(1.0, confidence)), 4)

        action = primary.action
        max_severity = primary.severity
        requires_review = any(m.requires_human_review for m in fired) or (
            action == ModerationAction.BLOCKED and max_severity >= 4
        )

        return ModerationResult(
            action=action,
            confidence=confidence,
            reason=self._reason(action, primary, len(fired)),
            source=self._source(match_set, synthetic),
            categories=tuple(_summary(m) for m in fired),
            requires_human_review=requires_review,
            review_priority=_review_priority(max_severity),
            suggested_account_action=str(
                EnforcementAction.SUSPEND_3D if max_severity >= 4 else EnforcementAction.WARN
            ),
            appealable=action != ModerationAction.APPROVED,
            degraded=degraded,
        )

    @staticmethod
    def _source(custom: MatchSet, synthetic: MatchSet) -> str:
        if custom and synthetic:
            return str(ModerationSource.COMBINED)
        if synthetic:
            return str(ModerationSource.EXTERNAL_CLASSIFIER)
        return str(ModerationSource.CUSTOM_RULES)

    @staticmethod
    def _reason(action: str, primary: RuleMatch, total: int) -> str:
        verb = "blocked" if action == ModerationAction.BLOCKED else "flagged for review"
        reason = f"Content {verb}: {primary.description}"
        if total > 1:
            reason += f" (+{total - 1} more)"
        return reason
