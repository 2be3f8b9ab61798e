import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from app.moderation.domain.enums import (
    AuthorRole,
    CommunityVisibility,
    ContentType,
    ModerationAction,
    ViolationCategory,
)
from app.moderation.exceptions import InvalidRuleError


def _as_tuple(values: Iterable[str] | None) -> tuple[str, ...]:
    return tuple(values or ())


@dataclass(frozen=True)
class ViolationRule:
    """
    Definição estática de uma regra de violação.

    Regras são dados de configuração mantidos pelos administradores e nunca
    são alteradas durante a avaliação. A validação acontece na construção:
    uma regra malformada não chega ao catálogo.
    """

    id: str
    name: str
    category: str
    severity: int
    base_confidence: float
    action: str
    description: str = ""
    patterns: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    regex_patterns: tuple[str, ...] = ()
    applicable_content_types: tuple[str, ...] = tuple(ContentType.values)
    applicable_author_roles: tuple[str, ...] = (AuthorRole.CLIENT, AuthorRole.TRAINER)
    applicable_community_visibility: tuple[str, ...] = tuple(CommunityVisibility.values)
    auto_block: bool = False
    requires_human_review: bool = False
    enabled: bool = True
    compiled_regexes: tuple[re.Pattern, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # normaliza membros de TextChoices para str puro
        for name in ("category", "action"):
            object.__setattr__(self, name, str(getattr(self, name)))
        for name in (
            "patterns",
            "keywords",
            "regex_patterns",
            "applicable_content_types",
            "applicable_author_roles",
            "applicable_community_visibility",
        ):
            object.__setattr__(self, name, tuple(str(v) for v in getattr(self, name)))

        self._validate()
        try:
            compiled = tuple(re.compile(p, re.IGNORECASE) for p in self.regex_patterns)
        except re.error as exc:
            raise InvalidRuleError(self.id, f"regex inválida: {exc}") from exc
        object.__setattr__(self, "compiled_regexes", compiled)

    def _validate(self) -> None:
        if not self.id:
            raise InvalidRuleError("<sem id>", "id é obrigatório")
        if isinstance(self.severity, bool) or not isinstance(self.severity, int) or not 1 <= self.severity <= 5:
            raise InvalidRuleError(self.id, f"severity fora de 1..5: {self.severity!r}")
        if not isinstance(self.base_confidence, (int, float)) or not 0.0 <= self.base_confidence <= 1.0:
            raise InvalidRuleError(self.id, f"base_confidence fora de 0..1: {self.base_confidence!r}")
        if self.category not in ViolationCategory.values:
            raise InvalidRuleError(self.id, f"categoria desconhecida: {self.category!r}")
        if self.action not in ModerationAction.values:
            raise InvalidRuleError(self.id, f"ação desconhecida: {self.action!r}")
        if self.auto_block and self.action != ModerationAction.BLOCKED:
            raise InvalidRuleError(self.id, "auto_block exige action BLOCKED")
        if not (self.patterns or self.keywords or self.regex_patterns):
            raise InvalidRuleError(self.id, "a regra precisa de ao menos um padrão, palavra-chave ou regex")

        for values, allowed, label in (
            (self.applicable_content_types, ContentType.values, "content type"),
            (self.applicable_author_roles, AuthorRole.values, "author role"),
            (self.applicable_community_visibility, CommunityVisibility.values, "visibility"),
        ):
            unknown = set(values) - set(allowed)
            if unknown:
                raise InvalidRuleError(self.id, f"{label} desconhecido: {sorted(unknown)}")

    @property
    def is_violation_rule(self) -> bool:
        return self.action != ModerationAction.APPROVED

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ViolationRule":
        """Constrói uma regra a partir de um registro de configuração (dict/JSON)."""
        try:
            return cls(
                id=data["id"],
                name=data["name"],
                category=data["category"],
                severity=data["severity"],
                base_confidence=data["base_confidence"],
                action=data["action"],
                description=data.get("description", ""),
                patterns=_as_tuple(data.get("patterns")),
                keywords=_as_tuple(data.get("keywords")),
                regex_patterns=_as_tuple(data.get("regex_patterns")),
                applicable_content_types=_as_tuple(data.get("applicable_content_types") or ContentType.values),
                applicable_author_roles=_as_tuple(
                    data.get("applicable_author_roles") or (AuthorRole.CLIENT, AuthorRole.TRAINER)
                ),
                applicable_community_visibility=_as_tuple(
                    data.get("applicable_community_visibility") or CommunityVisibility.values
                ),
                auto_block=bool(data.get("auto_block", False)),
                requires_human_review=bool(data.get("requires_human_review", False)),
                enabled=bool(data.get("enabled", True)),
            )
        except KeyError as exc:
            raise InvalidRuleError(str(data.get("id", "<sem id>")), f"campo obrigatório ausente: {exc}") from exc
