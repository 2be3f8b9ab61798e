import hashlib
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import structlog
from django.conf import settings
from django.core.cache import cache

from app.moderation.domain.catalog import RuleCatalog
from app.moderation.domain.composer import VerdictComposer
from app.moderation.domain.enums import ModerationAction, ModerationSource
from app.moderation.domain.matcher import RuleMatcher
from app.moderation.domain.positive import detect_positive_signals
from app.moderation.domain.results import BatchItem, ModerationContext, ModerationResult
from app.moderation.domain.strategies import ClassifierResult, ContentSafetyClassifier
from app.moderation.infrastructure.gemini import GeminiSafetyClassifier
from app.moderation.infrastructure.local import LocalDictionaryClassifier
from app.moderation.services.catalog import RuleCatalogService

logger = structlog.get_logger(__name__)

MAX_CONTENT_LENGTH = 10_000
CONTENT_TOO_LONG = "CONTENT_TOO_LONG"
BATCH_ERROR = "BATCH_ERROR"

_executor = ThreadPoolExecutor(max_workers=16, thread_name_prefix="safety-classifier")
_batch_executor = ThreadPoolExecutor(max_workers=10, thread_name_prefix="batch-moderation")


def blocked_result(code: str, message: str) -> ModerationResult:
    """Bloqueio sem categoria (erro de entrada ou de processamento); o autor pode recorrer."""
    return ModerationResult(
        action=ModerationAction.BLOCKED,
        confidence=1.0,
        reason=f"{code}: {message}",
        source=ModerationSource.CUSTOM_RULES,
        appealable=True,
    )


def is_batch_error(verdict: ModerationResult) -> bool:
    return verdict.reason.startswith(f"{BATCH_ERROR}:")


class ModerationService:
    """
    Application Service: Orquestra o veredicto de moderação.

    Responsabilidades:
    - Rodar as regras customizadas em paralelo com o classificador externo
    - Degradar para somente regras customizadas em erro/timeout do classificador
    - Cachear veredictos por texto e autor até a próxima recarga do catálogo
    - Expor interface única e síncrona para o pipeline e as tarefas (Celery)

    Esta camada NÃO conhece detalhes de implementação (APIs, arquivos).
    Apenas orquestra interfaces do Domain.
    """

    _CLASSIFIERS: dict[str, type[ContentSafetyClassifier]] = {
        "gemini": GeminiSafetyClassifier,
        "local": LocalDictionaryClassifier,
    }

    @staticmethod
    def provider_name() -> str:
        return settings.MODERATION_CLASSIFIER_PROVIDER.lower()

    @staticmethod
    def _get_classifier(provider: str) -> ContentSafetyClassifier:
        classifier_class = ModerationService._CLASSIFIERS.get(provider)

        if not classifier_class:
            logger.warning(
                "unknown_provider_fallback",
                provider=provider,
                available=list(ModerationService._CLASSIFIERS.keys()),
            )
            classifier_class = LocalDictionaryClassifier

        return classifier_class()

    @staticmethod
    def _classify(provider: str, content: str) -> ClassifierResult:
        return ModerationService._get_classifier(provider).classify(content)

    @staticmethod
    def _await_classifier(future, log) -> ClassifierResult | None:
        """
        Espera o classificador até o timeout. Retorna ``None`` quando ele não
        responde a tempo ou falha; o chamador compõe em modo degradado.
        """
        try:
            return future.result(timeout=settings.MODERATION_CLASSIFIER_TIMEOUT)
        except FutureTimeoutError:
            future.cancel()
            log.warning("classifier_timeout_degraded", timeout=settings.MODERATION_CLASSIFIER_TIMEOUT)
        except Exception as exc:
            log.warning("classifier_failed_degraded", error=str(exc))
        return None

    @staticmethod
    def _cache_key(content: str, context: ModerationContext, author_id, version: str) -> str:
        """``moderation:verdict:<versão do catálogo>:<autor>:<hash do texto, contexto e classificador>``."""
        digest = hashlib.sha256(
            "|".join(
                [
                    ModerationService.provider_name(),
                    str(settings.MODERATION_CLASSIFIER_THRESHOLD),
                    str(context.content_type),
                    str(context.author_role),
                    str(context.community_visibility),
                    content,
                ]
            ).encode("utf-8")
        ).hexdigest()
        return f"moderation:verdict:{version}:{author_id or 'anon'}:{digest}"

    @staticmethod
    def _moderate(
        content: str,
        context: ModerationContext,
        author_id=None,
        catalog: RuleCatalog | None = None,
        version: str | None = None,
    ) -> ModerationResult:
        log = logger.bind(content_type=context.content_type, author_role=context.author_role)

        if not content or not content.strip():
            return ModerationResult.approved(reason="Empty content provided")

        if len(content) > MAX_CONTENT_LENGTH:
            log.info("content_too_long", content_length=len(content))
            return blocked_result(CONTENT_TOO_LONG, "Content too long for moderation")

        cache_timeout = settings.MODERATION_VERDICT_CACHE_TIMEOUT
        cache_key = None
        if cache_timeout > 0:
            cache_key = ModerationService._cache_key(
                content, context, author_id, version or RuleCatalogService.version()
            )
            cached = cache.get(cache_key)
            if cached is not None:
                log.debug("moderation_cache_hit")
                return ModerationResult.from_dict(cached)

        if catalog is None:
            catalog = RuleCatalogService.get_catalog()
        provider = ModerationService.provider_name()
        future = _executor.submit(ModerationService._classify, provider, content)

        match_set = RuleMatcher(catalog).evaluate(content, context)
        positive = detect_positive_signals(content)

        external = ModerationService._await_classifier(future, log.bind(provider=provider))

        verdict = VerdictComposer(settings.MODERATION_CLASSIFIER_THRESHOLD).compose(match_set, external, positive)

        # veredicto degradado não vai para o cache
        if cache_key and not verdict.degraded:
            cache.set(cache_key, verdict.to_dict(), timeout=cache_timeout)

        log.info(
            "moderation_success",
            action=verdict.action,
            confidence=verdict.confidence,
            rule=verdict.primary.rule_id if verdict.primary else None,
            degraded=verdict.degraded,
        )
        return verdict

    @staticmethod
    def moderate(content: str, context: ModerationContext, author_id=None) -> ModerationResult:
        """
        Produz o veredicto para um conteúdo.

        Args:
            content: Texto submetido
            context: Tipo de conteúdo, papel do autor e visibilidade da comunidade
            author_id: Autor, usado apenas na chave do cache de veredictos

        Returns:
            ModerationResult imutável. ``degraded=True`` quando o classificador
            externo não participou da decisão.

        Raises:
            InvalidRuleError: se o catálogo cadastrado estiver malformado
        """
        return ModerationService._moderate(content, context, author_id)

    @staticmethod
    def moderate_batch(items: Sequence[BatchItem]) -> dict[str, ModerationResult]:
        """
        Modera vários textos em blocos de ``MODERATION_BATCH_SIZE``.

        O catálogo é carregado uma vez para o lote inteiro; os itens de um
        bloco rodam em paralelo e há uma pausa de ``MODERATION_BATCH_PAUSE``
        segundos entre blocos. Um item que falha vira BLOCKED ``BATCH_ERROR``
        (apelável) sem interromper os demais.

        Returns:
            Dict ``item.id -> ModerationResult`` na ordem de entrada

        Raises:
            InvalidRuleError: se o catálogo cadastrado estiver malformado
        """
        version = RuleCatalogService.version()
        catalog = RuleCatalogService.get_catalog()
        size = max(1, settings.MODERATION_BATCH_SIZE)
        log = logger.bind(total=len(items), chunk_size=size)

        results: dict[str, ModerationResult] = {}
        failed = 0
        for start in range(0, len(items), size):
            if start:
                time.sleep(settings.MODERATION_BATCH_PAUSE)

            chunk = items[start : start + size]
            futures = {
                item.id: _batch_executor.submit(
                    ModerationService._moderate, item.content, item.context, item.author_id, catalog, version
                )
                for item in chunk
            }
            for item_id, future in futures.items():
                try:
                    results[item_id] = future.result()
                except Exception as exc:
                    log.warning("batch_item_failed", item_id=item_id, error=str(exc))
                    results[item_id] = blocked_result(BATCH_ERROR, "Batch moderation failed")
                    failed += 1

        log.info("batch_moderation_finished", failed=failed)
        return results
