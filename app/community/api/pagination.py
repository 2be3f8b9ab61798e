from rest_framework.pagination import CursorPagination


class ContentCursorPagination(CursorPagination):
    """Paginação por cursor para o feed da comunidade (scroll infinito)."""

    page_size = 20
    ordering = "-created_at"
    cursor_query_param = "cursor"
