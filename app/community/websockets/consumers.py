import json
from typing import Any, Dict

import structlog
from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.core.exceptions import PermissionDenied

from app.community.models import Community, Content
from app.community.services.broadcast_service import community_group, user_group
from app.community.services.community_service import CommunityService
from app.community.services.content_service import ContentService
from app.moderation.exceptions import AccountRestrictedError

logger = structlog.get_logger(__name__)


class CommunityConsumer(AsyncWebsocketConsumer):
    """
    Consumer WebSocket da comunidade.

    Responsável por:
    - Conectar usuário ao grupo da comunidade e ao seu grupo pessoal
    - Receber conteúdo e submetê-lo à moderação
    - Entregar conteúdo aprovado e notificações de moderação/punição
    """

    async def connect(self) -> None:
        self.community_id = self.scope["url_route"]["kwargs"]["community_id"]
        self.community_group_name = community_group(self.community_id)
        self.user = self.scope["user"]

        log = logger.bind(user_id=str(getattr(self.user, "id", "anon")), community_id=self.community_id)

        if not self.user.is_authenticated:
            log.warning("ws_connection_unauthenticated")
            await self.close(code=4001)
            return

        try:
            self.community = await self._get_community()
        except Community.DoesNotExist:
            log.warning("ws_connection_community_not_found")
            await self.close(code=4004)
            return

        if not await self._can_participate():
            log.warning("ws_connection_forbidden", reason="not_member")
            await self.close(code=4003)
            return

        await self.channel_layer.group_add(self.community_group_name, self.channel_name)
        await self.channel_layer.group_add(user_group(self.user.id), self.channel_name)

        await self.accept()
        log.info("ws_connected")

        await self.send(
            text_data=json.dumps(
                {"type": "connection_established", "message": f"Conectado à comunidade {self.community_id}"}
            )
        )

    async def disconnect(self, close_code: int) -> None:
        if hasattr(self, "community_group_name"):
            await self.channel_layer.group_discard(self.community_group_name, self.channel_name)

        if hasattr(self, "user") and self.user.is_authenticated:
            await self.channel_layer.group_discard(user_group(self.user.id), self.channel_name)

        logger.info("ws_disconnected", user_id=str(getattr(self.user, "id", "anon")), close_code=close_code)

    async def receive(self, text_data: str) -> None:
        """
        Recebe conteúdo do cliente e envia para moderação.

        Args:
            text_data: JSON ``{"type": "submit_content", "body": "...", "content_type": "POST"}``
        """
        log = logger.bind(user_id=str(self.user.id), community_id=self.community_id)
        try:
            data = json.loads(text_data)
            message_type = data.get("type")

            if message_type == "submit_content":
                await self._handle_submit(data)
            else:
                log.warning("ws_unknown_message_type", type=message_type)
                await self._send_error(f"Tipo de mensagem desconhecido: {message_type}")

        except json.JSONDecodeError:
            log.warning("ws_invalid_json")
            await self._send_error("JSON inválido")
        except AccountRestrictedError as exc:
            log.info("ws_submit_restricted", status=exc.status)
            await self.send(
                text_data=json.dumps(
                    {
                        "type": "account_restricted",
                        "status": exc.status,
                        "suspended_until": exc.suspended_until.isoformat() if exc.suspended_until else None,
                    }
                )
            )
        except PermissionDenied as exc:
            log.warning("ws_submit_denied", reason=str(exc))
            await self._send_error(str(exc))
            await self.close(code=4003)
        except Exception as e:
            log.exception("ws_receive_error")
            await self._send_error(f"Erro ao processar conteúdo: {str(e)}")

    async def _handle_submit(self, data: Dict[str, Any]) -> None:
        body = (data.get("body") or "").strip()
        content_type = data.get("content_type", Content.Type.POST)

        if not body:
            await self._send_error("Conteúdo vazio")
            return
        if content_type not in Content.Type.values:
            await self._send_error(f"Tipo de conteúdo inválido: {content_type}")
            return

        content = await database_sync_to_async(ContentService.submit)(
            community=self.community, author=self.user, body=body, content_type=content_type
        )

        logger.info("ws_content_submitted", content_id=str(content.id), status=content.status)

        await self.send(
            text_data=json.dumps(
                {
                    "type": "content_submitted",
                    "content": {
                        "id": str(content.id),
                        "status": content.status,
                        "created_at": content.created_at.isoformat(),
                    },
                }
            )
        )

    async def _send_error(self, message: str) -> None:
        await self.send(text_data=json.dumps({"type": "error", "message": message}))

    async def content_published(self, event: Dict[str, Any]) -> None:
        """Conteúdo aprovado publicado na comunidade (via channel layer)."""
        await self.send(text_data=json.dumps({"type": "content_published", "content": event["message"]}))

    async def content_blocked(self, event: Dict[str, Any]) -> None:
        await self.send(text_data=json.dumps({"type": "content_blocked", "content": event["message"]}))

    async def content_under_review(self, event: Dict[str, Any]) -> None:
        await self.send(text_data=json.dumps({"type": "content_under_review", "content": event["message"]}))

    async def account_enforcement(self, event: Dict[str, Any]) -> None:
        await self.send(text_data=json.dumps({"type": "account_enforcement", "enforcement": event["message"]}))

    @database_sync_to_async
    def _get_community(self) -> Community:
        return Community.objects.get(id=self.community_id)

    @database_sync_to_async
    def _can_participate(self) -> bool:
        return CommunityService.can_participate(self.community, self.user)
