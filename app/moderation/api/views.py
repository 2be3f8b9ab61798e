from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet, ModelViewSet

from app.moderation.api.serializers import (
    AppealSerializer,
    AuditRecordSerializer,
    RecordFilterSerializer,
    ResolveReviewSerializer,
    StatsQuerySerializer,
    ViolationRuleRecordSerializer,
)
from app.moderation.models import AuditRecord, ViolationRuleRecord
from app.moderation.services.catalog import RuleCatalogService
from app.moderation.services.review import ReviewService
from app.moderation.services.stats import ModerationStatsService
from app.utils.pagination import CustomPageNumberPagination


@extend_schema_view(
    list=extend_schema(
        summary="Histórico de moderação",
        description="Admins veem todos os registros (com filtros); usuários veem apenas os próprios.",
        parameters=[RecordFilterSerializer],
    ),
    retrieve=extend_schema(summary="Detalhes do registro de auditoria"),
)
class AuditRecordViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, GenericViewSet):
    """Consulta da trilha de auditoria (somente leitura)."""

    serializer_class = AuditRecordSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = CustomPageNumberPagination

    def get_queryset(self):
        queryset = AuditRecord.objects.all()
        if not self.request.user.is_staff:
            return queryset.filter(author=self.request.user)

        if self.action != "list":
            return queryset

        filters = RecordFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data

        if params.get("author"):
            queryset = queryset.filter(author_id=params["author"])
        if params.get("action"):
            queryset = queryset.filter(action=params["action"].upper())
        if params.get("kind"):
            queryset = queryset.filter(kind=params["kind"].upper())
        if params.get("content_type"):
            queryset = queryset.filter(content_type=params["content_type"].upper())
        if params.get("degraded"):
            queryset = queryset.filter(degraded=params["degraded"] == "true")
        if params.get("date_from"):
            queryset = queryset.filter(created_at__gte=params["date_from"])
        if params.get("date_to"):
            queryset = queryset.filter(created_at__lte=params["date_to"])
        return queryset

    @extend_schema(
        summary="Recorrer de um veredicto",
        request=AppealSerializer,
        responses={201: AuditRecordSerializer},
    )
    @action(detail=True, methods=["post"], url_path="appeal")
    def appeal(self, request: Request, pk=None) -> Response:
        record = self.get_object()

        serializer = AppealSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        appeal = ReviewService.appeal(record.id, request.user, serializer.validated_data["reason"])
        return Response(AuditRecordSerializer(appeal).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    list=extend_schema(summary="Fila de revisão humana", description="Ordenada por prioridade e antiguidade."),
)
class ReviewQueueViewSet(mixins.ListModelMixin, GenericViewSet):
    serializer_class = AuditRecordSerializer
    permission_classes = [IsAdminUser]
    pagination_class = CustomPageNumberPagination

    def get_queryset(self):
        return ReviewService.queue()

    @extend_schema(
        summary="Resolver item da fila",
        request=ResolveReviewSerializer,
        responses={201: AuditRecordSerializer},
    )
    @action(detail=True, methods=["post"], url_path="resolve")
    def resolve(self, request: Request, pk=None) -> Response:
        serializer = ResolveReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = ReviewService.resolve(
            pk,
            reviewer=request.user,
            decision=serializer.validated_data["decision"],
            notes=serializer.validated_data["notes"],
        )
        return Response(AuditRecordSerializer(review).data, status=status.HTTP_201_CREATED)


class ModerationStatsView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(
        summary="Estatísticas de moderação",
        parameters=[OpenApiParameter("window", str, enum=["day", "week", "month"])],
    )
    def get(self, request: Request) -> Response:
        query = StatsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(ModerationStatsService.summary(query.validated_data["window"]))


@extend_schema_view(
    list=extend_schema(summary="Listar regras de violação"),
    create=extend_schema(summary="Cadastrar regra"),
    partial_update=extend_schema(summary="Atualizar regra"),
    destroy=extend_schema(summary="Remover regra"),
)
class ViolationRuleViewSet(ModelViewSet):
    """CRUD do catálogo de regras. Alterações recarregam o catálogo em memória."""

    queryset = ViolationRuleRecord.objects.all()
    serializer_class = ViolationRuleRecordSerializer
    permission_classes = [IsAdminUser]
    pagination_class = CustomPageNumberPagination

    def _set_enabled(self, enabled: bool) -> Response:
        rule = self.get_object()
        rule.enabled = enabled
        rule.save(update_fields=["enabled", "updated_at"])
        return Response(ViolationRuleRecordSerializer(rule).data)

    @extend_schema(summary="Ativar regra", request=None)
    @action(detail=True, methods=["post"])
    def enable(self, request: Request, pk=None) -> Response:
        return self._set_enabled(True)

    @extend_schema(summary="Desativar regra", request=None)
    @action(detail=True, methods=["post"])
    def disable(self, request: Request, pk=None) -> Response:
        return self._set_enabled(False)

    @extend_schema(summary="Estatísticas por regra")
    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        return Response(RuleCatalogService.rule_stats())

    @extend_schema(summary="Cadastrar catálogo padrão", request=None)
    @action(detail=False, methods=["post"], url_path="seed-defaults")
    def seed_defaults(self, request: Request) -> Response:
        created = RuleCatalogService.seed_defaults()
        return Response({"created": created}, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)
