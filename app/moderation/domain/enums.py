from django.db import models


class ModerationAction(models.TextChoices):
    APPROVED = "APPROVED", "Aprovado"
    FLAGGED = "FLAGGED", "Sinalizado"
    BLOCKED = "BLOCKED", "Bloqueado"


class ModerationSource(models.TextChoices):
    CUSTOM_RULES = "CUSTOM_RULES", "Regras customizadas"
    EXTERNAL_CLASSIFIER = "EXTERNAL_CLASSIFIER", "Classificador externo"
    COMBINED = "COMBINED", "Combinado"


class ViolationCategory(models.TextChoices):
    HARASSMENT = "HARASSMENT", "Assédio"
    IMPERSONATION = "IMPERSONATION", "Falsidade ideológica"
    SPAM = "SPAM", "Spam"
    PRIVACY_VIOLATION = "PRIVACY_VIOLATION", "Violação de privacidade"
    INAPPROPRIATE_CONTENT = "INAPPROPRIATE_CONTENT", "Conteúdo inapropriado"
    OFF_TOPIC = "OFF_TOPIC", "Fora do tema"
    HATE_SPEECH = "HATE_SPEECH", "Discurso de ódio"
    THREAT = "THREAT", "Ameaça"
    SELF_HARM = "SELF_HARM", "Autolesão"


class ContentType(models.TextChoices):
    POST = "POST", "Post"
    COMMENT = "COMMENT", "Comentário"
    MESSAGE = "MESSAGE", "Mensagem direta"
    PROFILE = "PROFILE", "Campo de perfil"


class AuthorRole(models.TextChoices):
    CLIENT = "CLIENT", "Cliente"
    TRAINER = "TRAINER", "Treinador"
    ADMIN = "ADMIN", "Administrador"


class CommunityVisibility(models.TextChoices):
    PUBLIC = "PUBLIC", "Pública"
    PRIVATE = "PRIVATE", "Privada"


class ReviewPriority(models.IntegerChoices):
    LOW = 1, "Baixa"
    MEDIUM = 2, "Média"
    HIGH = 3, "Alta"


class AccountStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Ativo"
    SUSPENDED = "SUSPENDED", "Suspenso"
    BANNED = "BANNED", "Banido"


class EnforcementAction(models.TextChoices):
    """Ordem de declaração = ordem de gravidade."""

    NONE = "NONE", "Nenhuma"
    WARN = "WARN", "Advertência"
    SUSPEND_3D = "SUSPEND_3D", "Suspensão de 3 dias"
    BAN = "BAN", "Banimento"

    @property
    def rank(self) -> int:
        return list(EnforcementAction).index(self)
