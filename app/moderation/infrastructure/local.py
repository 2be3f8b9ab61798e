import structlog
from django.conf import settings

from app.moderation.domain.strategies import ClassifierResult, ContentSafetyClassifier

logger = structlog.get_logger(__name__)


class LocalDictionaryClassifier(ContentSafetyClassifier):
    """
    Classificador usando dicionário local de palavras proibidas.

    Camada de Infraestrutura: qualquer palavra de ``settings.PROFANITY_LIST``
    presente no texto sinaliza a categoria ``harassment`` com score 1.0.
    """

    CATEGORY = "harassment"

    def __init__(self):
        self.blocked_words = [word.lower() for word in settings.PROFANITY_LIST]

    def classify(self, content: str) -> ClassifierResult:
        content_lower = content.lower()
        hit = next((word for word in self.blocked_words if word in content_lower), None)

        if hit:
            logger.info("local_dictionary_hit", word=hit)

        return ClassifierResult(
            flagged=hit is not None,
            provider=self.get_provider_name(),
            categories={self.CATEGORY: hit is not None},
            category_scores={self.CATEGORY: 1.0 if hit else 0.0},
        )

    def get_provider_name(self) -> str:
        return "local_dictionary"
