"""
Tradução das categorias do classificador externo para o formato de RuleMatch.

O classificador responde com categorias no estilo ``"harassment/threatening"``;
aqui elas ganham severidade, descrição e categoria de violação do domínio para
entrar no mesmo algoritmo de composição das regras customizadas.
"""

from app.moderation.domain.enums import ModerationAction, ModerationSource, ViolationCategory
from app.moderation.domain.results import MatchSet, RuleMatch
from app.moderation.domain.strategies import ClassifierResult

EXTERNAL_RULE_PREFIX = "EXTERNAL:"
DEFAULT_EXTERNAL_SEVERITY = 2

CATEGORY_SEVERITY = {
    "sexual": 4,
    "sexual/minors": 5,
    "hate": 4,
    "hate/threatening": 5,
    "harassment": 3,
    "harassment/threatening": 4,
    "self-harm": 3,
    "self-harm/intent": 4,
    "self-harm/instructions": 5,
    "violence": 3,
    "violence/graphic": 4,
}

CATEGORY_DESCRIPTIONS = {
    "sexual": "Sexual content or suggestive material",
    "sexual/minors": "Sexual content involving minors",
    "hate": "Hateful or discriminatory language",
    "hate/threatening": "Threatening hate speech",
    "harassment": "Harassment or bullying behavior",
    "harassment/threatening": "Threatening harassment",
    "self-harm": "Self-harm related content",
    "self-harm/intent": "Intent to self-harm",
    "self-harm/instructions": "Instructions for self-harm",
    "violence": "Violent content or language",
    "violence/graphic": "Graphic violent content",
}

_FAMILY_TO_CATEGORY = {
    "sexual": ViolationCategory.INAPPROPRIATE_CONTENT,
    "hate": ViolationCategory.HATE_SPEECH,
    "harassment": ViolationCategory.HARASSMENT,
    "self-harm": ViolationCategory.SELF_HARM,
    "violence": ViolationCategory.THREAT,
}


def violation_category_for(external_category: str) -> str:
    family = external_category.split("/", 1)[0]
    return str(_FAMILY_TO_CATEGORY.get(family, ViolationCategory.INAPPROPRIATE_CONTENT))


def external_matches(result: ClassifierResult | None, threshold: float) -> MatchSet:
    """
    Converte em RuleMatch as categorias sinalizadas pelo classificador (flag
    verdadeira e score >= threshold). Score alto sem flag não conta.
    Severidade 5 bloqueia; severidade >= 4 exige revisão humana.
    """
    if not result:
        return ()

    flags = result.get("categories") or {}
    scores = result.get("category_scores") or {}

    fired = []
    for order, category in enumerate(sorted(set(flags) | set(scores))):
        score = max(0.0, min(1.0, float(scores.get(category, 0.0))))
        if not flags.get(category) or score < threshold:
            continue

        severity = CATEGORY_SEVERITY.get(category, DEFAULT_EXTERNAL_SEVERITY)
        fired.append(
            RuleMatch(
                rule_id=f"{EXTERNAL_RULE_PREFIX}{category}",
                name=category.replace("/", " ").replace("-", " ").upper(),
                category=violation_category_for(category),
                description=CATEGORY_DESCRIPTIONS.get(category, f"Violation: {category}"),
                severity=severity,
                confidence=score,
                base_confidence=score,
                action=str(ModerationAction.BLOCKED if severity >= 5 else ModerationAction.FLAGGED),
                source=str(ModerationSource.EXTERNAL_CLASSIFIER),
                auto_block=severity >= 5,
                requires_human_review=severity >= 4,
                order=order,
            )
        )

    return tuple(fired)
