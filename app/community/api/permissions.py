from rest_framework.permissions import BasePermission

from app.community.models import CommunityMembership


class IsCommunityMemberOrPublic(BasePermission):
    """
    Verifica se o usuário pode acessar a comunidade.

    Permite acesso se:
    - Comunidade é pública (qualquer usuário autenticado)
    - Comunidade é privada E usuário é membro
    """

    def has_object_permission(self, request, view, obj) -> bool:
        if not obj.is_private:
            return True
        return CommunityMembership.objects.filter(community=obj, user=request.user).exists()


class IsCommunityAdmin(BasePermission):
    """Verifica se o usuário é administrador da comunidade."""

    def has_object_permission(self, request, view, obj) -> bool:
        return CommunityMembership.objects.filter(
            community=obj, user=request.user, role=CommunityMembership.Role.ADMIN
        ).exists()
