"""
Catálogo padrão de regras de violação específicas da comunidade fitness.

As regras são dados, não código: cada entrada é um registro de configuração
carregado e validado pelo ``RuleCatalog``. Administradores podem sobrescrever
este catálogo cadastrando regras no banco (``ViolationRuleRecord``).

Palavras-chave são comparadas por palavra inteira e disparam a regra sozinhas,
por isso só entram termos que indicam a violação por si mesmos.
"""

from app.moderation.domain.enums import (
    AuthorRole,
    CommunityVisibility,
    ContentType,
    ModerationAction,
    ViolationCategory,
)

_ALL_VISIBILITY = [CommunityVisibility.PUBLIC, CommunityVisibility.PRIVATE]
_MEMBERS = [AuthorRole.CLIENT, AuthorRole.TRAINER]

DEFAULT_RULES: list[dict] = [
    {
        "id": "INAPPROPRIATE_PERSONAL_COMMENTS",
        "name": "Inappropriate Personal Comments",
        "description": "Comments focusing on appearance rather than fitness performance",
        "category": ViolationCategory.INAPPROPRIATE_CONTENT,
        "severity": 4,
        "base_confidence": 0.8,
        "patterns": ["nice body", "sexy", "beautiful body", "gorgeous", "cute butt", "nice curves"],
        "keywords": ["sexy", "gorgeous", "curves", "butt", "hottie"],
        "regex_patterns": [
            r"\b(nice|great|amazing|sexy|hot)\s+(body|figure|physique|curves|butt|chest|legs)\b",
            r"\b(you\s+look|looking)\s+(sexy|hot|gorgeous|stunning)\b",
            r"\b(beautiful|gorgeous|stunning)\s+(woman|girl|lady|man|guy)\b",
        ],
        "applicable_content_types": [ContentType.POST, ContentType.COMMENT, ContentType.MESSAGE],
        "applicable_author_roles": _MEMBERS,
        "applicable_community_visibility": _ALL_VISIBILITY,
        "action": ModerationAction.FLAGGED,
        "auto_block": False,
        "requires_human_review": True,
    },
    {
        "id": "UNSOLICITED_PERSONAL_ATTENTION",
        "name": "Unsolicited Personal Attention",
        "description": "Unwanted personal attention or attempts to move contact off-platform",
        "category": ViolationCategory.HARASSMENT,
        "severity": 5,
        "base_confidence": 0.9,
        "patterns": [
            "want to meet",
            "hook up",
            "private session",
            "dm me",
            "text me",
            "my number is",
            "call me",
        ],
        "keywords": ["hookup"],
        "regex_patterns": [
            r"\b(want\s+to|let's)\s+(meet|hook\s+up|get\s+together)\b",
            r"\b(private|personal)\s+(session|meeting)\b",
            r"\b(dm|text|call)\s+me\b",
            r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b",
            r"\b[\w.%+-]+@[\w.-]+\.[a-z]{2,}\b",
        ],
        "applicable_content_types": [ContentType.COMMENT, ContentType.MESSAGE, ContentType.POST],
        "applicable_author_roles": _MEMBERS,
        "applicable_community_visibility": _ALL_VISIBILITY,
        "action": ModerationAction.BLOCKED,
        "auto_block": True,
        "requires_human_review": True,
    },
    {
        "id": "FAKE_TRAINER_CREDENTIALS",
        "name": "Fake Trainer Credentials",
        "description": "False claims about certifications or credentials",
        "category": ViolationCategory.IMPERSONATION,
        "severity": 4,
        "base_confidence": 0.7,
        "patterns": [
            "certified trainer",
            "nasm certified",
            "ace certified",
            "acsm certified",
            "personal trainer license",
            "nutrition specialist",
            "registered dietitian",
        ],
        "keywords": ["nasm", "acsm", "nsca", "dietitian"],
        "regex_patterns": [
            r"\b(certified|licensed)\s+(trainer|nutritionist|dietitian)\b",
            r"\b(NASM|ACE|ACSM|NSCA)\s+certified\b",
            r"\bregistered\s+dietitian\b",
        ],
        "applicable_content_types": [ContentType.PROFILE, ContentType.POST, ContentType.COMMENT],
        # apenas clientes alegando credenciais
        "applicable_author_roles": [AuthorRole.CLIENT],
        "applicable_community_visibility": _ALL_VISIBILITY,
        "action": ModerationAction.FLAGGED,
        "auto_block": False,
        "requires_human_review": True,
    },
    {
        "id": "UNSAFE_EXERCISE_ADVICE",
        "name": "Unsafe Exercise Advice",
        "description": "Potentially dangerous exercise recommendations",
        "category": ViolationCategory.OFF_TOPIC,
        "severity": 4,
        "base_confidence": 0.6,
        "patterns": [
            "no pain no gain",
            "push through the pain",
            "pain is weakness leaving",
            "ignore the pain",
            "max out every day",
            "no rest days",
            "more is always better",
        ],
        "keywords": [],
        "regex_patterns": [
            r"\b(no\s+pain\s+no\s+gain|push\s+through\s+the\s+pain)\b",
            r"\b(ignore\s+the\s+pain|pain\s+is\s+weakness)\b",
            r"\b(train|workout)\s+every\s+day\b",
            r"\bno\s+rest\s+days?\b",
        ],
        "applicable_content_types": [ContentType.POST, ContentType.COMMENT, ContentType.MESSAGE],
        "applicable_author_roles": _MEMBERS,
        "applicable_community_visibility": _ALL_VISIBILITY,
        "action": ModerationAction.FLAGGED,
        "auto_block": False,
        "requires_human_review": True,
    },
    {
        "id": "SUPPLEMENT_SPAM",
        "name": "Supplement Spam",
        "description": "Unauthorized supplement promotions or MLM content",
        "category": ViolationCategory.SPAM,
        "severity": 3,
        "base_confidence": 0.8,
        "patterns": [
            "buy now",
            "limited time",
            "special offer",
            "discount code",
            "affiliate link",
            "earn money",
            "join my team",
            "business opportunity",
            "work from home",
            "supplement deal",
        ],
        "keywords": ["mlm", "affiliate", "promo"],
        "regex_patterns": [
            r"\b(buy\s+now|limited\s+time|special\s+offer)\b",
            r"\b(discount\s+code|promo\s+code)\b",
            r"\b(join\s+my\s+team|business\s+opportunity)\b",
            r"\b(work\s+from\s+home|earn\s+money)\b",
        ],
        "applicable_content_types": [ContentType.POST, ContentType.COMMENT, ContentType.MESSAGE],
        "applicable_author_roles": _MEMBERS,
        "applicable_community_visibility": [CommunityVisibility.PUBLIC],
        "action": ModerationAction.BLOCKED,
        "auto_block": True,
        "requires_human_review": False,
    },
    {
        "id": "BODY_SHAMING",
        "name": "Body Shaming",
        "description": "Negative comments about body size, shape, or appearance",
        "category": ViolationCategory.HARASSMENT,
        "severity": 4,
        "base_confidence": 0.9,
        "patterns": ["too fat", "too skinny", "disgusting", "ugly", "pathetic", "just eat less"],
        "keywords": ["fatso", "ugly", "disgusting", "pathetic"],
        "regex_patterns": [
            r"\b(too\s+(fat|skinny|weak)|gross|disgusting|ugly)\b",
            r"\bjust\s+(eat\s+less|try\s+harder)\b",
            r"\b(lazy|pathetic|weak)\s+(person|people)\b",
        ],
        "applicable_content_types": [ContentType.POST, ContentType.COMMENT, ContentType.MESSAGE],
        "applicable_author_roles": _MEMBERS,
        "applicable_community_visibility": _ALL_VISIBILITY,
        "action": ModerationAction.BLOCKED,
        "auto_block": True,
        "requires_human_review": True,
    },
    {
        "id": "NUTRITION_MISINFORMATION",
        "name": "Nutrition Misinformation",
        "description": "False or dangerous nutritional advice",
        "category": ViolationCategory.OFF_TOPIC,
        "severity": 3,
        "base_confidence": 0.6,
        "patterns": [
            "detox tea",
            "cleanse",
            "magic pill",
            "lose weight fast",
            "burn fat instantly",
            "no exercise needed",
            "eat whatever you want",
            "miracle cure",
        ],
        "keywords": ["detox", "cleanse", "miracle"],
        "regex_patterns": [
            r"\b(detox|cleanse|magic\s+pill)\b",
            r"\b(lose\s+weight\s+fast|burn\s+fat\s+instantly)\b",
            r"\b(no\s+exercise\s+needed|eat\s+whatever)\b",
            r"\b(miracle\s+cure|secret\s+trick)\b",
        ],
        "applicable_content_types": [ContentType.POST, ContentType.COMMENT],
        "applicable_author_roles": _MEMBERS,
        "applicable_community_visibility": [CommunityVisibility.PUBLIC],
        "action": ModerationAction.FLAGGED,
        "auto_block": False,
        "requires_human_review": True,
    },
    {
        "id": "PREDATORY_TRAINING_OFFERS",
        "name": "Predatory Training Offers",
        "description": "Exploitative or manipulative business practices",
        "category": ViolationCategory.HARASSMENT,
        "severity": 4,
        "base_confidence": 0.8,
        "patterns": ["pay upfront", "no refunds", "must decide now", "limited spots", "guaranteed results"],
        "keywords": ["upfront", "nonrefundable"],
        "regex_patterns": [
            r"\b(pay\s+upfront|no\s+refunds)\b",
            r"\b(must\s+decide\s+now|limited\s+spots)\b",
            r"\bguaranteed\s+results\b",
        ],
        "applicable_content_types": [ContentType.MESSAGE, ContentType.POST],
        "applicable_author_roles": [AuthorRole.TRAINER],
        "applicable_community_visibility": [CommunityVisibility.PRIVATE, CommunityVisibility.PUBLIC],
        "action": ModerationAction.FLAGGED,
        "auto_block": False,
        "requires_human_review": True,
    },
    {
        "id": "OFF_TOPIC_CONTENT",
        "name": "Off-Topic Content",
        "description": "Content not related to fitness, health, or wellness",
        "category": ViolationCategory.OFF_TOPIC,
        "severity": 2,
        "base_confidence": 0.5,
        "patterns": ["politics", "religion", "cryptocurrency", "stock market", "real estate", "celebrity gossip"],
        "keywords": ["politics", "political", "religion", "religious", "crypto", "bitcoin", "stocks", "gossip"],
        "regex_patterns": [
            r"\b(politics|political|religion|religious)\b",
            r"\b(crypto|bitcoin|stock\s+market)\b",
            r"\b(real\s+estate|dating)\b",
        ],
        "applicable_content_types": [ContentType.POST, ContentType.COMMENT],
        "applicable_author_roles": _MEMBERS,
        "applicable_community_visibility": [CommunityVisibility.PUBLIC],
        "action": ModerationAction.FLAGGED,
        "auto_block": False,
        "requires_human_review": False,
    },
    {
        "id": "PRIVACY_INVASION",
        "name": "Privacy Invasion",
        "description": "Sharing personal information without consent",
        "category": ViolationCategory.PRIVACY_VIOLATION,
        "severity": 5,
        "base_confidence": 0.9,
        "patterns": ["real name is", "home address is", "phone number is"],
        "keywords": ["doxx", "doxxed", "doxxing"],
        "regex_patterns": [
            r"\b(real\s+name|full\s+name)\s+is\b",
            r"\b(home\s+address|phone\s+number)\s+is\b",
            r"\b(she|he|they)\s+(works\s+at|lives\s+(in|at)|goes\s+to\s+gym)\b",
        ],
        "applicable_content_types": [ContentType.POST, ContentType.COMMENT, ContentType.MESSAGE],
        "applicable_author_roles": _MEMBERS,
        "applicable_community_visibility": _ALL_VISIBILITY,
        "action": ModerationAction.BLOCKED,
        "auto_block": True,
        "requires_human_review": True,
    },
]
