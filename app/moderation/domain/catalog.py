from typing import Iterable, Iterator

from app.moderation.domain.default_rules import DEFAULT_RULES
from app.moderation.domain.results import ModerationContext
from app.moderation.domain.rules import ViolationRule
from app.moderation.exceptions import InvalidRuleError


class RuleCatalog:
    """
    Tabela imutável de regras de violação.

    A ordem de inserção é preservada e usada como último critério de desempate
    no compositor, o que mantém o resultado determinístico.
    """

    def __init__(self, rules: Iterable[ViolationRule]):
        rules = tuple(rules)
        seen: set[str] = set()
        for rule in rules:
            if rule.id in seen:
                raise InvalidRuleError(rule.id, "id duplicado no catálogo")
            seen.add(rule.id)

        self._rules = rules
        self._by_id = {rule.id: rule for rule in rules}
        self._order = {rule.id: index for index, rule in enumerate(rules)}

    @classmethod
    def from_dicts(cls, records: Iterable[dict]) -> "RuleCatalog":
        return cls(ViolationRule.from_dict(record) for record in records)

    @classmethod
    def default(cls) -> "RuleCatalog":
        return cls.from_dicts(DEFAULT_RULES)

    def __iter__(self) -> Iterator[ViolationRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._by_id

    def get(self, rule_id: str) -> ViolationRule | None:
        return self._by_id.get(rule_id)

    def position(self, rule_id: str) -> int:
        return self._order[rule_id]

    @property
    def active_rules(self) -> tuple[ViolationRule, ...]:
        return tuple(rule for rule in self._rules if rule.enabled)

    def applicable_to(self, context: ModerationContext) -> tuple[ViolationRule, ...]:
        """Regras ativas de violação cujo escopo inclui o contexto informado."""
        return tuple(
            rule
            for rule in self.active_rules
            if rule.is_violation_rule
            and context.content_type in rule.applicable_content_types
            and context.author_role in rule.applicable_author_roles
            and context.community_visibility in rule.applicable_community_visibility
        )
