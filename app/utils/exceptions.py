import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from app.moderation.exceptions import AccountRestrictedError, ReviewStateError

logger = structlog.get_logger(__name__)


def _moderation_response(exc):
    if isinstance(exc, AccountRestrictedError):
        return Response(
            {
                "detail": "Sua conta está com restrições e não pode publicar no momento.",
                "status": exc.status,
                "suspended_until": exc.suspended_until.isoformat() if exc.suspended_until else None,
                "appeal": "/api/moderation/records/",
            },
            status=status.HTTP_403_FORBIDDEN,
        )
    if isinstance(exc, ReviewStateError):
        return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
    return None


def custom_exception_handler(exc, context):
    """
    Handler de exceção customizado para DRF.
    Loga erros de forma estruturada e mantém resposta padrão do DRF.
    Exceções de moderação voltadas ao usuário viram respostas 403/409.
    """
    response = exception_handler(exc, context) or _moderation_response(exc)

    if response is not None:
        if response.status_code < 500:
            logger.warning(
                "api_client_error",
                status_code=response.status_code,
                method=context["request"].method,
                path=context["request"].path,
                details=response.data,
            )
        else:
            logger.error(
                "api_server_error",
                status_code=response.status_code,
                method=context["request"].method,
                path=context["request"].path,
                exc=str(exc),
            )
    else:
        logger.exception(
            "api_unhandled_exception", method=context["request"].method, path=context["request"].path, exc=str(exc)
        )
        return Response(
            {"detail": "Ocorreu um erro inesperado no servidor."}, status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return response
