from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from app.community.models import Content


def community_group(community_id) -> str:
    return f"community_{community_id}"


def user_group(user_id) -> str:
    return f"user_{user_id}"


class BroadcastService:
    """Serviço responsável por comunicação via WebSocket (Channel Layer)."""

    @staticmethod
    def _send(group: str, event_type: str, payload: dict) -> None:
        channel_layer = get_channel_layer()
        async_to_sync(channel_layer.group_send)(group, {"type": event_type, "message": payload})

    @staticmethod
    def broadcast_content(content: Content) -> None:
        """
        Publica conteúdo aprovado para todos os membros conectados à comunidade.

        Args:
            content: Conteúdo com status APPROVED
        """
        BroadcastService._send(
            community_group(content.community_id),
            "content_published",
            {
                "id": str(content.id),
                "content_type": content.content_type,
                "body": content.body,
                "parent_id": str(content.parent_id) if content.parent_id else None,
                "author": {
                    "id": str(content.author.id),
                    "name": content.author.name,
                },
                "status": content.status,
                "created_at": content.created_at.isoformat(),
            },
        )

    @staticmethod
    def notify_author_blocked(content: Content, reason: str) -> None:
        """
        Notifica o autor, no canal privado, que o conteúdo foi bloqueado.

        Args:
            content: Conteúdo bloqueado
            reason: Motivo do veredicto
        """
        BroadcastService._send(
            user_group(content.author_id),
            "content_blocked",
            {
                "id": str(content.id),
                "body": content.body,
                "reason": reason or "content_violation",
                "appealable": True,
                "created_at": content.created_at.isoformat(),
            },
        )

    @staticmethod
    def notify_author_under_review(content: Content) -> None:
        BroadcastService._send(
            user_group(content.author_id),
            "content_under_review",
            {
                "id": str(content.id),
                "detail": "Seu conteúdo está em revisão pela equipe de moderação.",
            },
        )

    @staticmethod
    def notify_enforcement(user_id, enforcement: dict) -> None:
        """
        Avisa o usuário sobre advertência, suspensão ou banimento.

        Args:
            user_id: Usuário punido
            enforcement: ``EnforcementResult.to_dict()``
        """
        BroadcastService._send(
            user_group(user_id),
            "account_enforcement",
            {
                "action": enforcement["action_taken"],
                "status": enforcement["new_status"],
                "effective_until": enforcement["effective_until"],
                "reputation": enforcement["new_reputation"],
                "reason": enforcement["reason"],
            },
        )
