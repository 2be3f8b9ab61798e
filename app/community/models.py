from django.conf import settings
from django.db import models

from app.utils.models import BaseModel


class Community(BaseModel):
    class Visibility(models.TextChoices):
        PUBLIC = "PUBLIC", "Pública"
        PRIVATE = "PRIVATE", "Privada"

    name = models.CharField("Nome da Comunidade", max_length=255)
    description = models.TextField("Descrição", blank=True, default="")
    visibility = models.CharField(
        "Visibilidade", max_length=20, choices=Visibility.choices, default=Visibility.PUBLIC
    )
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL, through="CommunityMembership", related_name="communities", verbose_name="Membros"
    )

    class Meta:
        verbose_name = "Comunidade"
        verbose_name_plural = "Comunidades"
        indexes = [
            models.Index(fields=["name"], name="community_c_name_idx"),
            models.Index(fields=["visibility", "created_at"], name="community_c_visib_idx"),
        ]

    def __str__(self):
        return self.name

    @property
    def is_private(self) -> bool:
        return self.visibility == self.Visibility.PRIVATE


class CommunityMembership(BaseModel):
    """Modelo intermediário que gerencia participação em comunidades com roles."""

    class Role(models.TextChoices):
        ADMIN = "ADMIN", "Administrador"
        MEMBER = "MEMBER", "Membro"

    community = models.ForeignKey(Community, on_delete=models.CASCADE, related_name="memberships")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="community_memberships"
    )
    role = models.CharField("Função", max_length=20, choices=Role.choices, default=Role.MEMBER)

    class Meta:
        verbose_name = "Membro da Comunidade"
        verbose_name_plural = "Membros da Comunidade"
        unique_together = [["community", "user"]]
        indexes = [
            models.Index(fields=["community", "role"], name="community_m_comm_role_idx"),
            models.Index(fields=["user", "role"], name="community_m_user_role_idx"),
        ]

    def __str__(self):
        return f"{self.user} em {self.community} ({self.get_role_display()})"


class Content(BaseModel):
    class Type(models.TextChoices):
        POST = "POST", "Post"
        COMMENT = "COMMENT", "Comentário"
        MESSAGE = "MESSAGE", "Mensagem direta"
        PROFILE = "PROFILE", "Campo de perfil"

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pendente"
        APPROVED = "APPROVED", "Aprovado"
        UNDER_REVIEW = "UNDER_REVIEW", "Em revisão"
        BLOCKED = "BLOCKED", "Bloqueado"

    community = models.ForeignKey(
        Community, on_delete=models.CASCADE, related_name="contents", verbose_name="Comunidade"
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="contents", verbose_name="Autor"
    )
    parent = models.ForeignKey(
        "self", on_delete=models.CASCADE, null=True, blank=True, related_name="replies", verbose_name="Em resposta a"
    )
    content_type = models.CharField("Tipo", max_length=20, choices=Type.choices, default=Type.POST)
    body = models.TextField("Conteúdo", blank=True)
    status = models.CharField("Status", max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)

    class Meta:
        verbose_name = "Conteúdo"
        verbose_name_plural = "Conteúdos"
        indexes = [
            models.Index(fields=["community", "status", "created_at"], name="community_ct_feed_idx"),
            models.Index(fields=["author", "created_at"], name="community_ct_author_idx"),
        ]
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.author.email}: {self.body[:50]}"

    @property
    def is_visible(self) -> bool:
        return self.status == self.Status.APPROVED
