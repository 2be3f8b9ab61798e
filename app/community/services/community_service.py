from typing import Optional

from django.core.exceptions import PermissionDenied

from app.accounts.models import User
from app.community.models import Community, CommunityMembership


class CommunityService:
    """Service para gerenciar operações de comunidades."""

    @staticmethod
    def create_community(
        name: str, creator: User, visibility: str = Community.Visibility.PUBLIC, description: str = ""
    ) -> Community:
        """
        Cria uma nova comunidade com o criador como ADMIN.

        Args:
            name: Nome da comunidade
            creator: Usuário criador (será ADMIN automaticamente)
            visibility: PUBLIC ou PRIVATE
            description: Descrição opcional

        Returns:
            Community: Comunidade criada
        """
        community = Community.objects.create(name=name, visibility=visibility, description=description)
        CommunityMembership.objects.create(community=community, user=creator, role=CommunityMembership.Role.ADMIN)
        return community

    @staticmethod
    def is_member(community: Community, user: User) -> bool:
        return CommunityMembership.objects.filter(community=community, user=user).exists()

    @staticmethod
    def can_participate(community: Community, user: User) -> bool:
        """Comunidade pública: qualquer usuário autenticado. Privada: apenas membros."""
        return not community.is_private or CommunityService.is_member(community, user)

    @staticmethod
    def _require_admin(community: Community, requester: Optional[User], verb: str) -> None:
        if not requester:
            raise PermissionDenied("Requester é obrigatório para comunidades privadas.")

        is_admin = CommunityMembership.objects.filter(
            community=community, user=requester, role=CommunityMembership.Role.ADMIN
        ).exists()

        if not is_admin:
            raise PermissionDenied(f"Apenas administradores podem {verb} membros em comunidades privadas.")

    @staticmethod
    def add_member(community: Community, new_user: User, requester: Optional[User] = None) -> CommunityMembership:
        """
        Adiciona um membro à comunidade com validação de permissões.

        Em comunidades privadas, apenas ADMINs podem adicionar novos membros.

        Raises:
            PermissionDenied: Se requester não é ADMIN em comunidade privada
        """
        if community.is_private:
            CommunityService._require_admin(community, requester, "adicionar")

        membership, _ = CommunityMembership.objects.get_or_create(
            community=community, user=new_user, defaults={"role": CommunityMembership.Role.MEMBER}
        )
        return membership

    @staticmethod
    def remove_member(community: Community, user_to_remove: User, requester: Optional[User] = None) -> None:
        """
        Remove um membro da comunidade com validação de permissões.

        Raises:
            PermissionDenied: Se requester não é ADMIN em comunidade privada
        """
        if community.is_private:
            CommunityService._require_admin(community, requester, "remover")

        CommunityMembership.objects.filter(community=community, user=user_to_remove).delete()
