import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

MODERATION_ACTIONS = [("APPROVED", "Aprovado"), ("FLAGGED", "Sinalizado"), ("BLOCKED", "Bloqueado")]
ENFORCEMENT_ACTIONS = [
    ("NONE", "Nenhuma"),
    ("WARN", "Advertência"),
    ("SUSPEND_3D", "Suspensão de 3 dias"),
    ("BAN", "Banimento"),
]
CATEGORIES = [
    ("HARASSMENT", "Assédio"),
    ("IMPERSONATION", "Falsidade ideológica"),
    ("SPAM", "Spam"),
    ("PRIVACY_VIOLATION", "Violação de privacidade"),
    ("INAPPROPRIATE_CONTENT", "Conteúdo inapropriado"),
    ("OFF_TOPIC", "Fora do tema"),
    ("HATE_SPEECH", "Discurso de ódio"),
    ("THREAT", "Ameaça"),
    ("SELF_HARM", "Autolesão"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("community", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="EnforcementConfig",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Atualizado em")),
                (
                    "reputation_score",
                    models.PositiveSmallIntegerField(
                        default=100,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                        verbose_name="Reputação",
                    ),
                ),
                ("warning_count", models.PositiveIntegerField(default=0, verbose_name="Advertências")),
                (
                    "status",
                    models.CharField(
                        choices=[("ACTIVE", "Ativo"), ("SUSPENDED", "Suspenso"), ("BANNED", "Banido")],
                        db_index=True,
                        default="ACTIVE",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "suspended_until",
                    models.DateTimeField(blank=True, db_index=True, null=True, verbose_name="Suspenso até"),
                ),
                ("last_violation_at", models.DateTimeField(blank=True, null=True, verbose_name="Última violação")),
                ("last_suspended_at", models.DateTimeField(blank=True, null=True, verbose_name="Última suspensão")),
                ("last_recovered_at", models.DateTimeField(blank=True, null=True, verbose_name="Última recuperação")),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enforcement",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Usuário",
                    ),
                ),
            ],
            options={
                "verbose_name": "Situação do Usuário",
                "verbose_name_plural": "Situações dos Usuários",
                "indexes": [
                    models.Index(fields=["status", "suspended_until"], name="moderation_ec_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Atualizado em")),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("MODERATION", "Moderação"),
                            ("ENFORCEMENT", "Punição"),
                            ("REVIEW", "Revisão humana"),
                            ("APPEAL", "Recurso"),
                            ("RECONCILIATION", "Reconciliação"),
                        ],
                        db_index=True,
                        default="MODERATION",
                        max_length=20,
                        verbose_name="Tipo",
                    ),
                ),
                (
                    "content_type",
                    models.CharField(blank=True, default="", max_length=20, verbose_name="Tipo de conteúdo"),
                ),
                (
                    "action",
                    models.CharField(choices=MODERATION_ACTIONS, db_index=True, max_length=20, verbose_name="Ação"),
                ),
                ("confidence", models.FloatField(default=0.0, help_text="0.0 a 1.0", verbose_name="Confiança")),
                (
                    "source",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("CUSTOM_RULES", "Regras customizadas"),
                            ("EXTERNAL_CLASSIFIER", "Classificador externo"),
                            ("COMBINED", "Combinado"),
                        ],
                        default="",
                        max_length=30,
                        verbose_name="Fonte",
                    ),
                ),
                ("reason", models.TextField(blank=True, default="", verbose_name="Motivo")),
                (
                    "primary_category",
                    models.CharField(
                        blank=True,
                        choices=CATEGORIES,
                        db_index=True,
                        default="",
                        max_length=30,
                        verbose_name="Categoria principal",
                    ),
                ),
                (
                    "primary_rule",
                    models.CharField(blank=True, db_index=True, default="", max_length=100, verbose_name="Regra principal"),
                ),
                ("categories", models.JSONField(default=list, verbose_name="Categorias")),
                (
                    "requires_human_review",
                    models.BooleanField(db_index=True, default=False, verbose_name="Requer revisão humana"),
                ),
                (
                    "review_priority",
                    models.PositiveSmallIntegerField(
                        choices=[(1, "Baixa"), (2, "Média"), (3, "Alta")],
                        default=1,
                        verbose_name="Prioridade de revisão",
                    ),
                ),
                (
                    "suggested_account_action",
                    models.CharField(
                        choices=ENFORCEMENT_ACTIONS, default="NONE", max_length=20, verbose_name="Ação sugerida"
                    ),
                ),
                ("appealable", models.BooleanField(default=False, verbose_name="Passível de recurso")),
                ("degraded", models.BooleanField(db_index=True, default=False, verbose_name="Modo degradado")),
                ("provider", models.CharField(blank=True, default="", max_length=50, verbose_name="Provedor")),
                (
                    "enforcement_action",
                    models.CharField(
                        blank=True, choices=ENFORCEMENT_ACTIONS, default="", max_length=20, verbose_name="Punição aplicada"
                    ),
                ),
                (
                    "previous_status",
                    models.CharField(blank=True, default="", max_length=20, verbose_name="Status anterior"),
                ),
                ("new_status", models.CharField(blank=True, default="", max_length=20, verbose_name="Novo status")),
                ("reputation_delta", models.SmallIntegerField(default=0, verbose_name="Variação de reputação")),
                ("effective_until", models.DateTimeField(blank=True, null=True, verbose_name="Vigente até")),
                ("notes", models.TextField(blank=True, default="", verbose_name="Observações")),
                (
                    "raw_payload",
                    models.JSONField(default=dict, help_text="Veredicto completo", verbose_name="Payload Bruto"),
                ),
                (
                    "author",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_records",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Autor",
                    ),
                ),
                (
                    "content",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_records",
                        to="community.content",
                        verbose_name="Conteúdo",
                    ),
                ),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="moderation.auditrecord",
                        verbose_name="Registro de origem",
                    ),
                ),
                (
                    "reviewer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reviewed_records",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Revisor",
                    ),
                ),
            ],
            options={
                "verbose_name": "Registro de Auditoria",
                "verbose_name_plural": "Registros de Auditoria",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["author", "created_at"], name="moderation_ar_author_idx"),
                    models.Index(
                        fields=["kind", "requires_human_review", "review_priority"], name="moderation_ar_queue_idx"
                    ),
                    models.Index(fields=["action", "created_at"], name="moderation_ar_action_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ViolationRuleRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Atualizado em")),
                ("rule_id", models.CharField(max_length=100, unique=True, verbose_name="Identificador")),
                ("name", models.CharField(max_length=255, verbose_name="Nome")),
                ("description", models.TextField(blank=True, default="", verbose_name="Descrição")),
                ("category", models.CharField(choices=CATEGORIES, max_length=30, verbose_name="Categoria")),
                (
                    "severity",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ],
                        verbose_name="Severidade",
                    ),
                ),
                (
                    "base_confidence",
                    models.FloatField(
                        validators=[
                            django.core.validators.MinValueValidator(0.0),
                            django.core.validators.MaxValueValidator(1.0),
                        ],
                        verbose_name="Confiança base",
                    ),
                ),
                ("action", models.CharField(choices=MODERATION_ACTIONS, max_length=20, verbose_name="Ação")),
                ("patterns", models.JSONField(blank=True, default=list, verbose_name="Padrões")),
                ("keywords", models.JSONField(blank=True, default=list, verbose_name="Palavras-chave")),
                ("regex_patterns", models.JSONField(blank=True, default=list, verbose_name="Expressões regulares")),
                (
                    "applicable_content_types",
                    models.JSONField(blank=True, default=list, verbose_name="Tipos de conteúdo"),
                ),
                ("applicable_author_roles", models.JSONField(blank=True, default=list, verbose_name="Papéis de autor")),
                (
                    "applicable_community_visibility",
                    models.JSONField(blank=True, default=list, verbose_name="Visibilidade da comunidade"),
                ),
                ("auto_block", models.BooleanField(default=False, verbose_name="Bloqueio automático")),
                ("requires_human_review", models.BooleanField(default=False, verbose_name="Requer revisão humana")),
                ("enabled", models.BooleanField(db_index=True, default=True, verbose_name="Ativa")),
                (
                    "position",
                    models.PositiveIntegerField(
                        default=0, help_text="Desempate entre regras de mesma severidade", verbose_name="Ordem"
                    ),
                ),
            ],
            options={
                "verbose_name": "Regra de Violação",
                "verbose_name_plural": "Regras de Violação",
                "ordering": ["position", "created_at"],
            },
        ),
    ]
