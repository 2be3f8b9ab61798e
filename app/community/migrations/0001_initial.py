import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Community",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Atualizado em")),
                ("name", models.CharField(max_length=255, verbose_name="Nome da Comunidade")),
                ("description", models.TextField(blank=True, default="", verbose_name="Descrição")),
                (
                    "visibility",
                    models.CharField(
                        choices=[("PUBLIC", "Pública"), ("PRIVATE", "Privada")],
                        default="PUBLIC",
                        max_length=20,
                        verbose_name="Visibilidade",
                    ),
                ),
            ],
            options={
                "verbose_name": "Comunidade",
                "verbose_name_plural": "Comunidades",
            },
        ),
        migrations.CreateModel(
            name="CommunityMembership",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Atualizado em")),
                (
                    "role",
                    models.CharField(
                        choices=[("ADMIN", "Administrador"), ("MEMBER", "Membro")],
                        default="MEMBER",
                        max_length=20,
                        verbose_name="Função",
                    ),
                ),
                (
                    "community",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="community.community",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="community_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Membro da Comunidade",
                "verbose_name_plural": "Membros da Comunidade",
                "unique_together": {("community", "user")},
            },
        ),
        migrations.AddField(
            model_name="community",
            name="members",
            field=models.ManyToManyField(
                related_name="communities",
                through="community.CommunityMembership",
                to=settings.AUTH_USER_MODEL,
                verbose_name="Membros",
            ),
        ),
        migrations.CreateModel(
            name="Content",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Atualizado em")),
                (
                    "content_type",
                    models.CharField(
                        choices=[
                            ("POST", "Post"),
                            ("COMMENT", "Comentário"),
                            ("MESSAGE", "Mensagem direta"),
                            ("PROFILE", "Campo de perfil"),
                        ],
                        default="POST",
                        max_length=20,
                        verbose_name="Tipo",
                    ),
                ),
                ("body", models.TextField(blank=True, verbose_name="Conteúdo")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pendente"),
                            ("APPROVED", "Aprovado"),
                            ("UNDER_REVIEW", "Em revisão"),
                            ("BLOCKED", "Bloqueado"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "author",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="contents",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Autor",
                    ),
                ),
                (
                    "community",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="contents",
                        to="community.community",
                        verbose_name="Comunidade",
                    ),
                ),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="replies",
                        to="community.content",
                        verbose_name="Em resposta a",
                    ),
                ),
            ],
            options={
                "verbose_name": "Conteúdo",
                "verbose_name_plural": "Conteúdos",
                "ordering": ["created_at"],
            },
        ),
        migrations.AddIndex(
            model_name="community",
            index=models.Index(fields=["name"], name="community_c_name_idx"),
        ),
        migrations.AddIndex(
            model_name="community",
            index=models.Index(fields=["visibility", "created_at"], name="community_c_visib_idx"),
        ),
        migrations.AddIndex(
            model_name="communitymembership",
            index=models.Index(fields=["community", "role"], name="community_m_comm_role_idx"),
        ),
        migrations.AddIndex(
            model_name="communitymembership",
            index=models.Index(fields=["user", "role"], name="community_m_user_role_idx"),
        ),
        migrations.AddIndex(
            model_name="content",
            index=models.Index(fields=["community", "status", "created_at"], name="community_ct_feed_idx"),
        ),
        migrations.AddIndex(
            model_name="content",
            index=models.Index(fields=["author", "created_at"], name="community_ct_author_idx"),
        ),
    ]
