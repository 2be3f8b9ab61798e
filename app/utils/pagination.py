from rest_framework.pagination import PageNumberPagination


class CustomPageNumberPagination(PageNumberPagination):
    """Paginação padrão das listagens (registros de auditoria, regras, usuários)."""

    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100
