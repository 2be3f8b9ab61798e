from abc import ABC, abstractmethod
from typing import TypedDict


class ClassifierResult(TypedDict):
    flagged: bool
    provider: str
    categories: dict[str, bool]
    category_scores: dict[str, float]


class ContentSafetyClassifier(ABC):
    """
    Interface abstrata para classificadores genéricos de segurança de conteúdo.

    Define o contrato que todos os provedores externos devem seguir,
    permitindo trocar provedores (Gemini, Local) sem afetar o domínio.
    O classificador só informa categorias e scores: a decisão de aprovar,
    sinalizar ou bloquear é sempre do VerdictComposer.
    """

    @abstractmethod
    def classify(self, content: str) -> ClassifierResult:
        """
        Classifica o conteúdo por categoria de risco.

        Args:
            content: Texto a ser classificado

        Returns:
            ClassifierResult com flags e scores (0.0 a 1.0) por categoria

        Raises:
            ClassifierUnavailableError: quando o provedor falha ou responde algo ilegível
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Retorna identificador único do provedor."""
        pass
