import re

from app.moderation.domain.catalog import RuleCatalog
from app.moderation.domain.enums import ModerationSource
from app.moderation.domain.results import MatchSet, ModerationContext, RuleMatch
from app.moderation.domain.rules import ViolationRule

LONG_CONTENT_THRESHOLD = 500
LONG_CONTENT_FACTOR = 0.9
MATCH_BONUS_STEP = 0.1
MATCH_BONUS_CAP = 0.3
EXACT_PATTERN_BONUS = 0.1

_WORD_RE = re.compile(r"[\w']+")


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class RuleMatcher:
    """
    Avalia um conteúdo contra o catálogo de regras customizadas.

    Função pura: não tem estado mutável além do catálogo (somente leitura),
    então pode rodar concorrentemente com a chamada ao classificador externo.
    """

    def __init__(self, catalog: RuleCatalog):
        self.catalog = catalog

    def evaluate(self, content: str, context: ModerationContext) -> MatchSet:
        lowered = content.lower()
        words = set(_WORD_RE.findall(lowered))

        fired: list[RuleMatch] = []
        for rule in self.catalog.applicable_to(context):
            matches = self.find_matches(rule, content, lowered, words)
            if not matches:
                continue

            fired.append(
                RuleMatch(
                    rule_id=rule.id,
                    name=rule.name,
                    category=rule.category,
                    description=rule.description,
                    severity=rule.severity,
                    confidence=self.calculate_confidence(rule, matches, content),
                    base_confidence=rule.base_confidence,
                    action=rule.action,
                    source=ModerationSource.CUSTOM_RULES,
                    auto_block=rule.auto_block,
                    requires_human_review=rule.requires_human_review,
                    matches=matches,
                    order=self.catalog.position(rule.id),
                )
            )

        return tuple(fired)

    @staticmethod
    def find_matches(rule: ViolationRule, content: str, lowered: str, words: set[str]) -> tuple[str, ...]:
        """
        Une as três estratégias (substring, palavra inteira, regex) e remove
        duplicatas sem diferenciar maiúsculas, preservando a primeira ocorrência.
        """
        candidates: list[str] = []
        candidates.extend(p for p in rule.patterns if p.lower() in lowered)
        candidates.extend(k for k in rule.keywords if k.lower() in words)
        for regex in rule.compiled_regexes:
            found = regex.search(content)
            if found:
                candidates.append(found.group(0))

        unique: dict[str, str] = {}
        for candidate in candidates:
            unique.setdefault(candidate.lower(), candidate)
        return tuple(unique.values())

    @staticmethod
    def calculate_confidence(rule: ViolationRule, matches: tuple[str, ...], content: str) -> float:
        confidence = rule.base_confidence + min(MATCH_BONUS_CAP, MATCH_BONUS_STEP * len(matches))

        if len(content) > LONG_CONTENT_THRESHOLD:
            confidence *= LONG_CONTENT_FACTOR

        patterns = {p.lower() for p in rule.patterns}
        if any(match.lower() in patterns for match in matches):
            confidence += EXACT_PATTERN_BONUS

        return round(_clamp(confidence), 4)
