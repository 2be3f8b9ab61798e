import json

import structlog
from django.conf import settings
from google import genai
from google.genai import types

from app.moderation.domain.external import CATEGORY_SEVERITY
from app.moderation.domain.strategies import ClassifierResult, ContentSafetyClassifier
from app.moderation.exceptions import ClassifierUnavailableError

logger = structlog.get_logger(__name__)


class GeminiSafetyClassifier(ContentSafetyClassifier):
    """
    Classificador de segurança usando Google Gemini AI.

    Camada de Infraestrutura: responsável por detalhes técnicos
    de integração com API externa do Google Gemini.
    """

    SYSTEM_INSTRUCTION = f"""
    Você é um classificador de segurança de conteúdo de alta precisão.
    Para o texto recebido, atribua um score de 0.0 a 1.0 para cada categoria:
    {", ".join(CATEGORY_SEVERITY)}.

    Retorne APENAS um objeto JSON com o formato:
    {{
        "flagged": boolean,
        "categories": {{"<categoria>": boolean}},
        "category_scores": {{"<categoria>": float}}
    }}
    """

    def __init__(self):
        api_key = settings.GOOGLE_API_KEY
        if not api_key:
            raise ValueError("GOOGLE_API_KEY não configurada")

        timeout_ms = int(settings.MODERATION_CLASSIFIER_TIMEOUT * 1000)
        self.client = genai.Client(api_key=api_key, http_options=types.HttpOptions(timeout=timeout_ms))
        self.model = settings.GEMINI_MODEL

    def classify(self, content: str) -> ClassifierResult:
        log = logger.bind(provider="gemini", content_length=len(content))

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=content,
                config=types.GenerateContentConfig(
                    system_instruction=self.SYSTEM_INSTRUCTION,
                    response_mime_type="application/json",
                    temperature=0.0,
                ),
            )
            payload = json.loads(response.text)
        except Exception as exc:
            log.exception("gemini_api_error", error=str(exc))
            raise ClassifierUnavailableError(f"Gemini indisponível: {exc}") from exc

        result = self._parse(payload)
        log.info(
            "gemini_classification_result",
            flagged=result["flagged"],
            categories=[c for c, flagged in result["categories"].items() if flagged],
        )
        return result

    def _parse(self, payload: dict) -> ClassifierResult:
        try:
            categories = {str(k): bool(v) for k, v in (payload.get("categories") or {}).items()}
            scores = {str(k): float(v) for k, v in (payload.get("category_scores") or {}).items()}
        except (AttributeError, TypeError, ValueError) as exc:
            raise ClassifierUnavailableError(f"Resposta do Gemini ilegível: {payload!r}") from exc

        return ClassifierResult(
            flagged=bool(payload.get("flagged", any(categories.values()))),
            provider=self.get_provider_name(),
            categories=categories,
            category_scores=scores,
        )

    def get_provider_name(self) -> str:
        return "google_gemini"
