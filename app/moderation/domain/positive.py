from app.moderation.domain.results import PositiveSignal

FITNESS_KEYWORDS = (
    "workout",
    "exercise",
    "fitness",
    "training",
    "health",
    "wellness",
    "nutrition",
    "diet",
    "protein",
    "cardio",
    "strength",
    "muscle",
    "motivation",
    "progress",
    "goals",
    "achievement",
    "improvement",
    "coach",
    "trainer",
    "guidance",
    "support",
    "community",
    "journey",
    "squat",
    "deadlift",
    "bench press",
    "mobility",
    "stretch",
    "recovery",
)

ENCOURAGING_PHRASES = (
    "great job",
    "well done",
    "keep going",
    "you can do it",
    "proud of you",
    "amazing progress",
    "inspiring",
    "motivated",
    "helpful",
    "supportive",
)

KEYWORD_WEIGHT = 0.1
PHRASE_WEIGHT = 0.15
MAX_BONUS = 0.3


def detect_positive_signals(content: str) -> PositiveSignal:
    """
    Procura sinais de conteúdo no tema (vocabulário fitness) e de incentivo.

    O bônus só reduz a confiança de uma violação no compositor; nunca
    transforma uma violação em aprovação.
    """
    lowered = content.lower()
    keywords = tuple(k for k in FITNESS_KEYWORDS if k in lowered)
    phrases = tuple(p for p in ENCOURAGING_PHRASES if p in lowered)

    bonus = min(MAX_BONUS, KEYWORD_WEIGHT * len(keywords) + PHRASE_WEIGHT * len(phrases))

    return PositiveSignal(
        is_on_topic=bool(keywords),
        confidence_bonus=round(bonus, 4),
        indicators=keywords + phrases,
    )
