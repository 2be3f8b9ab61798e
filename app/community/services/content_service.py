from typing import Optional

import structlog
from django.core.exceptions import PermissionDenied

from app.accounts.models import User
from app.community.models import Community, Content
from app.community.services.community_service import CommunityService
from app.moderation.domain.enums import AccountStatus
from app.moderation.exceptions import AccountRestrictedError
from app.moderation.services.enforcement import EnforcementService
from app.moderation.services.pipeline import ModerationPipeline

logger = structlog.get_logger(__name__)


class ContentService:
    """
    Service para submissão de conteúdo.
    Conteúdo nasce PENDING e só fica visível depois do veredicto.
    """

    @staticmethod
    def submit(
        community: Community,
        author: User,
        body: str,
        content_type: str = Content.Type.POST,
        parent: Optional[Content] = None,
    ) -> Content:
        """
        Cria o conteúdo e roda a moderação de forma síncrona.

        Se o pipeline falhar, o conteúdo continua PENDING (invisível) e a
        moderação é reenfileirada no Celery; nunca é aprovado por omissão.

        Args:
            community: Comunidade de destino
            author: Autor do conteúdo
            body: Texto submetido
            content_type: POST, COMMENT, MESSAGE ou PROFILE
            parent: Conteúdo respondido (comentários)

        Returns:
            Content com o status resultante da moderação

        Raises:
            AccountRestrictedError: autor suspenso ou banido
            PermissionDenied: autor fora de uma comunidade privada
        """
        standing = EnforcementService.refresh_status(author.id)
        if standing.status != AccountStatus.ACTIVE:
            raise AccountRestrictedError(standing.status, standing.suspended_until)

        if not CommunityService.can_participate(community, author):
            raise PermissionDenied("Apenas membros podem publicar nesta comunidade.")

        content = Content.objects.create(
            community=community,
            author=author,
            parent=parent,
            content_type=content_type,
            body=body,
            status=Content.Status.PENDING,
        )
        log = logger.bind(content_id=str(content.id), author_id=str(author.id))

        try:
            ModerationPipeline.process(content.id)
        except Exception as exc:
            log.exception("inline_moderation_failed", error=str(exc))

            from app.moderation.tasks import moderate_content_task

            moderate_content_task.delay(str(content.id))

        content.refresh_from_db()
        return content
