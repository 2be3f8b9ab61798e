from rest_framework import serializers

from app.accounts.models import User
from app.community.models import Community, CommunityMembership, Content


class AuthorSerializer(serializers.ModelSerializer):
    """Serializer para representação aninhada do autor."""

    class Meta:
        model = User
        fields = ["id", "name", "role"]
        read_only_fields = fields


class CommunitySerializer(serializers.ModelSerializer):
    """Serializer para leitura de comunidades."""

    members_count = serializers.SerializerMethodField()

    class Meta:
        model = Community
        fields = ["id", "name", "description", "visibility", "created_at", "members_count"]
        read_only_fields = fields

    def get_members_count(self, obj: Community) -> int:
        return obj.memberships.count()


class CommunityCreateSerializer(serializers.Serializer):
    """Serializer para criação de comunidades."""

    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    visibility = serializers.ChoiceField(choices=Community.Visibility.choices, default=Community.Visibility.PUBLIC)


class MembershipSerializer(serializers.ModelSerializer):
    user = AuthorSerializer(read_only=True)

    class Meta:
        model = CommunityMembership
        fields = ["user", "role", "created_at"]
        read_only_fields = fields


class AddMemberSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()


class ContentSerializer(serializers.ModelSerializer):
    """
    Conteúdo como o feed exibe. Conteúdo fora do ar aparece para o próprio
    autor apenas com uma mensagem genérica de status.
    """

    author = AuthorSerializer(read_only=True)
    status_message = serializers.SerializerMethodField()

    class Meta:
        model = Content
        fields = ["id", "content_type", "body", "parent", "status", "status_message", "created_at", "author"]
        read_only_fields = fields

    def get_status_message(self, obj: Content) -> str | None:
        messages = {
            Content.Status.PENDING: "Aguardando moderação.",
            Content.Status.UNDER_REVIEW: "Em revisão pela equipe de moderação.",
            Content.Status.BLOCKED: "Bloqueado por violar as regras da comunidade.",
        }
        return messages.get(obj.status)


class ContentSubmitSerializer(serializers.Serializer):
    body = serializers.CharField(allow_blank=False, trim_whitespace=False)
    content_type = serializers.ChoiceField(choices=Content.Type.choices, default=Content.Type.POST)
    parent = serializers.UUIDField(required=False, allow_null=True)
