from django.contrib.auth import get_user_model
from rest_framework import serializers

from app.moderation.domain.enums import AccountStatus
from app.moderation.models import EnforcementConfig

User = get_user_model()


class RegisterSerializer(serializers.ModelSerializer):
    """Serializer para registro de usuário. Papel ADMIN só é atribuído pelo admin do Django."""

    password = serializers.CharField(write_only=True, min_length=8)
    role = serializers.ChoiceField(
        choices=[User.Role.CLIENT, User.Role.TRAINER], default=User.Role.CLIENT, required=False
    )

    class Meta:
        model = User
        fields = ["id", "email", "name", "role", "password"]
        read_only_fields = ["id"]

    def create(self, validated_data: dict) -> User:
        password = validated_data.pop("password")
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user


class UserSerializer(serializers.ModelSerializer):
    """Serializer para dados do usuário."""

    class Meta:
        model = User
        fields = ["id", "email", "name", "role"]
        read_only_fields = fields


class StandingSerializer(serializers.ModelSerializer):
    """Situação da conta: reputação, advertências e suspensão."""

    can_appeal = serializers.SerializerMethodField()

    class Meta:
        model = EnforcementConfig
        fields = ["reputation_score", "warning_count", "status", "suspended_until", "can_appeal"]
        read_only_fields = fields

    def get_can_appeal(self, obj: EnforcementConfig) -> bool:
        return obj.status != AccountStatus.ACTIVE
