from datetime import datetime


class ModerationError(Exception):
    """Erro base do domínio de moderação."""


class InvalidRuleError(ModerationError):
    """Regra com configuração inválida, rejeitada no carregamento do catálogo."""

    def __init__(self, rule_id: str, problem: str):
        self.rule_id = rule_id
        self.problem = problem
        super().__init__(f"Regra inválida '{rule_id}': {problem}")


class ClassifierUnavailableError(ModerationError):
    """Classificador externo indisponível, com erro ou estourou o timeout."""


class EnforcementWriteError(ModerationError):
    """Falha persistente ao gravar a punição de um usuário."""


class AccountRestrictedError(ModerationError):
    """Usuário suspenso ou banido tentando interagir."""

    def __init__(self, status: str, suspended_until: datetime | None = None):
        self.status = status
        self.suspended_until = suspended_until
        message = f"Conta com status {status}"
        if suspended_until:
            message += f" até {suspended_until.isoformat()}"
        super().__init__(message)


class ImmutableAuditRecordError(ModerationError):
    """Registros de auditoria são append-only: não podem ser alterados nem removidos."""


class ReviewStateError(ModerationError):
    """Revisão ou recurso fora do estado esperado (já resolvido, não apelável, etc.)."""
