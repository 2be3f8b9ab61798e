from urllib.parse import parse_qs

import structlog
from channels.db import database_sync_to_async
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from jwt import ExpiredSignatureError, InvalidTokenError
from jwt import decode as jwt_decode

User = get_user_model()

logger = structlog.get_logger(__name__)


def token_from_scope(scope) -> str | None:
    """Token JWT enviado em ``?token=`` na URL do WebSocket."""
    query_params = parse_qs(scope.get("query_string", b"").decode("utf-8"))
    return query_params.get("token", [None])[0]


@database_sync_to_async
def get_user(token_key: str):
    """
    Resolve o usuário do token. Tokens inválidos, expirados ou de contas
    desativadas resultam em AnonymousUser; o consumer fecha com 4001.
    """
    jwt_settings = settings.SIMPLE_JWT
    try:
        payload = jwt_decode(
            token_key,
            jwt_settings.get("SIGNING_KEY", settings.SECRET_KEY),
            algorithms=[jwt_settings.get("ALGORITHM", "HS256")],
        )
    except ExpiredSignatureError:
        logger.info("ws_token_expired")
        return AnonymousUser()
    except InvalidTokenError:
        logger.warning("ws_token_invalid")
        return AnonymousUser()

    user_id = payload.get(jwt_settings.get("USER_ID_CLAIM", "user_id"))
    if not user_id:
        return AnonymousUser()

    return User.objects.filter(id=user_id, is_active=True).first() or AnonymousUser()


class JwtAuthMiddleware:
    """
    Autentica conexões WebSocket pelo token JWT da query string.
    Ex: ws://.../ws/communities/<id>/?token=eyJhbGci...
    """

    def __init__(self, inner):
        self.inner = inner

    async def __call__(self, scope, receive, send):
        token = token_from_scope(scope)
        scope["user"] = await get_user(token) if token else AnonymousUser()
        return await self.inner(scope, receive, send)
