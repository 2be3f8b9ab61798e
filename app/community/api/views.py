from django.db.models import Q
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet

from app.accounts.models import User
from app.community.api.pagination import ContentCursorPagination
from app.community.api.permissions import IsCommunityAdmin, IsCommunityMemberOrPublic
from app.community.api.serializers import (
    AddMemberSerializer,
    CommunityCreateSerializer,
    CommunitySerializer,
    ContentSerializer,
    ContentSubmitSerializer,
    MembershipSerializer,
)
from app.community.models import Community, Content
from app.community.services.community_service import CommunityService
from app.community.services.content_service import ContentService


@extend_schema_view(
    list=extend_schema(
        summary="Listar comunidades do usuário",
    ),
    create=extend_schema(
        summary="Criar nova comunidade",
        request=CommunityCreateSerializer,
        responses={201: CommunitySerializer},
    ),
    retrieve=extend_schema(
        summary="Detalhes da comunidade",
    ),
)
class CommunityViewSet(ModelViewSet):
    """ViewSet para gerenciamento de comunidades."""

    permission_classes = [IsAuthenticated, IsCommunityMemberOrPublic]
    serializer_class = CommunitySerializer
    http_method_names = ["get", "post", "delete", "head", "options"]

    def get_queryset(self):
        return (
            Community.objects.filter(Q(members=self.request.user) | Q(visibility=Community.Visibility.PUBLIC))
            .distinct()
            .prefetch_related("memberships")
            .order_by("-created_at")
        )

    def get_serializer_class(self):
        if self.action == "create":
            return CommunityCreateSerializer
        return CommunitySerializer

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = CommunityCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        community = CommunityService.create_community(creator=request.user, **serializer.validated_data)

        return Response(CommunitySerializer(community).data, status=status.HTTP_201_CREATED)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        community = self.get_object()
        if not IsCommunityAdmin().has_object_permission(request, self, community):
            return Response({"detail": "Apenas administradores podem remover a comunidade."}, status=status.HTTP_403_FORBIDDEN)
        community.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Adicionar membro à comunidade",
        request=AddMemberSerializer,
        responses={201: MembershipSerializer},
    )
    @action(
        detail=True,
        methods=["post"],
        url_path="members",
        permission_classes=[IsAuthenticated, IsCommunityMemberOrPublic],
    )
    def add_member(self, request: Request, pk=None) -> Response:
        """Adiciona um membro (em comunidades privadas, apenas ADMIN)."""
        community = self.get_object()

        serializer = AddMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = User.objects.filter(pk=serializer.validated_data["user_id"]).first()
        if not user:
            return Response({"detail": "Usuário não encontrado."}, status=status.HTTP_404_NOT_FOUND)

        membership = CommunityService.add_member(community=community, new_user=user, requester=request.user)

        return Response(MembershipSerializer(membership).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Remover membro da comunidade")
    @action(
        detail=True,
        methods=["delete"],
        url_path="members/(?P<user_id>[^/.]+)",
        permission_classes=[IsAuthenticated, IsCommunityMemberOrPublic, IsCommunityAdmin],
    )
    def remove_member(self, request: Request, pk=None, user_id=None) -> Response:
        community = self.get_object()

        user_to_remove = User.objects.filter(pk=user_id).first()
        if not user_to_remove:
            return Response({"detail": "Usuário não encontrado."}, status=status.HTTP_404_NOT_FOUND)

        CommunityService.remove_member(community=community, user_to_remove=user_to_remove, requester=request.user)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Feed da comunidade",
        responses={200: ContentSerializer(many=True)},
        tags=["Contents"],
    )
    @action(detail=True, methods=["get"], url_path="contents")
    def contents(self, request: Request, pk=None) -> Response:
        """Lista conteúdos com paginação por cursor.

        Retorna:
        - Todos os conteúdos com status APPROVED.
        - Conteúdos do próprio usuário (mesmo se PENDING, UNDER_REVIEW ou BLOCKED).
        """
        community = self.get_object()

        queryset = (
            Content.objects.filter(Q(community=community), Q(status=Content.Status.APPROVED) | Q(author=request.user))
            .select_related("author")
            .order_by("-created_at")
        )

        paginator = ContentCursorPagination()
        page = paginator.paginate_queryset(queryset, request)

        if page is not None:
            serializer = ContentSerializer(page, many=True)
            return paginator.get_paginated_response(serializer.data)

        serializer = ContentSerializer(queryset, many=True)
        return Response(serializer.data)

    @extend_schema(
        summary="Publicar conteúdo",
        description="Cria o conteúdo e devolve o status após a moderação.",
        request=ContentSubmitSerializer,
        responses={201: ContentSerializer},
        tags=["Contents"],
    )
    @contents.mapping.post
    def submit_content(self, request: Request, pk=None) -> Response:
        community = self.get_object()

        serializer = ContentSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        parent = None
        parent_id = serializer.validated_data.get("parent")
        if parent_id:
            parent = Content.objects.filter(pk=parent_id, community=community).first()
            if not parent:
                return Response({"detail": "Conteúdo respondido não encontrado."}, status=status.HTTP_404_NOT_FOUND)

        content = ContentService.submit(
            community=community,
            author=request.user,
            body=serializer.validated_data["body"],
            content_type=serializer.validated_data["content_type"],
            parent=parent,
        )

        return Response(ContentSerializer(content).data, status=status.HTTP_201_CREATED)
