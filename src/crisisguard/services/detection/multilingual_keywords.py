"""
Multilingual Crisis Keyword Tables

Weighted keyword tables used by the default statistical scorer.

CLINICAL_REVIEW_REQUIRED: Weights and phrases were curated with
native speakers and must be reviewed with them before changes ship.

Weight scale:
- urgent keywords: 8-10
- moderate keywords: 4-7
- cultural expressions: idioms of distress, 4-9
- help-seeking phrases: counted at 80% of their weight
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

HELP_SEEKING_FACTOR = 0.8


@dataclass(frozen=True)
class WeightedKeyword:
    """A keyword phrase with its risk weight and optional cultural tags."""

    phrase: str
    weight: float
    contexts: tuple[str, ...] = ()


@dataclass(frozen=True)
class KeywordTable:
    """Keyword groups for one language."""

    language: str
    urgent: tuple[WeightedKeyword, ...]
    moderate: tuple[WeightedKeyword, ...]
    cultural: tuple[WeightedKeyword, ...]
    help_seeking: tuple[WeightedKeyword, ...]


def _kw(phrase: str, weight: float, *contexts: str) -> WeightedKeyword:
    return WeightedKeyword(phrase=phrase, weight=weight, contexts=contexts)


_TABLES: dict[str, KeywordTable] = {
    "en": KeywordTable(
        language="en",
        urgent=(
            _kw("suicide", 10),
            _kw("suicidal", 10),
            _kw("kill myself", 10),
            _kw("end it all", 9),
            _kw("end it", 9),
            _kw("want to die", 9),
            _kw("no way out", 8),
            _kw("can't go on", 8),
            _kw("self harm", 8),
            _kw("self-harm", 8),
            _kw("ending things", 9),
            _kw("done with this shit", 8),
            _kw("gonna end it", 9),
        ),
        moderate=(
            _kw("hopeless", 7),
            _kw("worthless", 6),
            _kw("burden", 6),
            _kw("alone", 5),
            _kw("trapped", 7),
            _kw("pain", 5),
            _kw("can't take it", 6),
            _kw("thinking about", 4),
        ),
        cultural=(
            _kw("rock bottom", 7),
            _kw("at the end of my rope", 8),
            _kw("drowning", 6, "metaphorical"),
            _kw("done with", 7),
            _kw("over it", 6),
        ),
        help_seeking=(
            _kw("need help", 6),
            _kw("someone please", 7),
            _kw("reach out", 5),
        ),
    ),
    "es": KeywordTable(
        language="es",
        urgent=(
            _kw("suicidio", 10),
            _kw("matarme", 10),
            _kw("quitarme la vida", 10),
            _kw("quiero morir", 9),
            _kw("no puedo más", 8),
            _kw("sin salida", 8),
            _kw("autolesión", 8),
        ),
        moderate=(
            _kw("sin esperanza", 7),
            _kw("inútil", 6),
            _kw("carga", 6),
            _kw("solo", 5),
            _kw("sola", 5),
            _kw("atrapado", 7),
            _kw("atrapada", 7),
            _kw("dolor", 5),
        ),
        cultural=(
            _kw("tocar fondo", 7),
            _kw("al límite", 8),
            _kw("ahogándome", 6, "metaphorical"),
            _kw("dios mío", 4, "religious"),
            _kw("virgen santa", 4, "religious"),
            _kw("me lleva", 5, "colloquial"),
        ),
        help_seeking=(
            _kw("necesito ayuda", 6),
            _kw("alguien por favor", 7),
            _kw("auxilio", 8),
            _kw("socorro", 8),
        ),
    ),
    "pt": KeywordTable(
        language="pt",
        urgent=(
            _kw("suicídio", 10),
            _kw("me matar", 10),
            _kw("tirar a vida", 10),
            _kw("quero morrer", 9),
            _kw("não aguento mais", 8),
            _kw("sem saída", 8),
            _kw("autolesão", 8),
        ),
        moderate=(
            _kw("sem esperança", 7),
            _kw("inútil", 6),
            _kw("fardo", 6),
            _kw("sozinho", 5),
            _kw("sozinha", 5),
            _kw("preso", 7),
            _kw("presa", 7),
            _kw("dor", 5),
        ),
        cultural=(
            _kw("chegar ao fundo do poço", 7),
            _kw("no limite", 8),
            _kw("me afogando", 6, "metaphorical"),
            _kw("meu deus", 4, "religious"),
            _kw("nossa senhora", 4, "religious"),
            _kw("tô ferrado", 5, "brazilian_colloquial"),
        ),
        help_seeking=(
            _kw("preciso de ajuda", 6),
            _kw("alguém por favor", 7),
            _kw("me ajudem", 7),
            _kw("socorro", 8),
        ),
    ),
    "ar": KeywordTable(
        language="ar",
        urgent=(
            _kw("انتحار", 10),
            _kw("أقتل نفسي", 10),
            _kw("أريد أن أموت", 9),
            _kw("لا أستطيع المتابعة", 8),
            _kw("لا مخرج", 8),
            _kw("إيذاء النفس", 8),
        ),
        moderate=(
            _kw("بلا أمل", 7),
            _kw("عديم الفائدة", 6),
            _kw("عبء", 6),
            _kw("وحيد", 5),
            _kw("وحيدة", 5),
            _kw("محاصر", 7),
            _kw("محاصرة", 7),
            _kw("ألم", 5),
        ),
        cultural=(
            _kw("وصلت للقاع", 7),
            _kw("في الحضيض", 8),
            _kw("أغرق", 6, "metaphorical"),
            _kw("يا رب", 4, "religious"),
            _kw("الله يعين", 4, "religious"),
            _kw("حسبي الله", 5, "religious"),
        ),
        help_seeking=(
            _kw("أحتاج مساعدة", 6),
            _kw("أحد من فضلكم", 7),
            _kw("ساعدوني", 7),
            _kw("النجدة", 8),
        ),
    ),
    "zh": KeywordTable(
        language="zh",
        urgent=(
            _kw("自杀", 10),
            _kw("杀死自己", 10),
            _kw("想死", 9),
            _kw("活不下去", 8),
            _kw("没有出路", 8),
            _kw("自伤", 8),
        ),
        moderate=(
            _kw("绝望", 7),
            _kw("无用", 6),
            _kw("负担", 6),
            _kw("孤独", 5),
            _kw("被困", 7),
            _kw("痛苦", 5),
        ),
        cultural=(
            _kw("走投无路", 8),
            _kw("山穷水尽", 7),
            _kw("生无可恋", 9, "traditional"),
            _kw("度日如年", 6, "traditional"),
        ),
        help_seeking=(
            _kw("需要帮助", 6),
            _kw("请帮忙", 7),
            _kw("救救我", 8),
        ),
    ),
    "vi": KeywordTable(
        language="vi",
        urgent=(
            _kw("tự tử", 10),
            _kw("giết mình", 10),
            _kw("muốn chết", 9),
            _kw("không thể tiếp tục", 8),
            _kw("không có lối thoát", 8),
            _kw("tự hại", 8),
        ),
        moderate=(
            _kw("tuyệt vọng", 7),
            _kw("vô dụng", 6),
            _kw("gánh nặng", 6),
            _kw("cô đơn", 5),
            _kw("bị mắc kẹt", 7),
            _kw("đau khổ", 5),
        ),
        cultural=(
            _kw("chạm đáy", 7),
            _kw("cùng đường", 8),
            _kw("chìm đắm", 6, "metaphorical"),
            _kw("trời ơi", 4, "exclamation"),
        ),
        help_seeking=(
            _kw("cần giúp đỡ", 6),
            _kw("ai đó xin hãy", 7),
            _kw("cứu giúp", 8),
        ),
    ),
    "tl": KeywordTable(
        language="tl",
        urgent=(
            _kw("magpakamatay", 10),
            _kw("patayin ang sarili", 10),
            _kw("gusto kong mamatay", 9),
            _kw("hindi na kaya", 8),
            _kw("walang labas", 8),
            _kw("saktan ang sarili", 8),
        ),
        moderate=(
            _kw("walang pag-asa", 7),
            _kw("walang silbi", 6),
            _kw("pabigat", 6),
            _kw("mag-isa", 5),
            _kw("nakulong", 7),
            _kw("sakit", 5),
        ),
        cultural=(
            _kw("nasa ilalim na", 7),
            _kw("wala na talaga", 8),
            _kw("nalulunod", 6, "metaphorical"),
            _kw("diyos ko", 4, "religious"),
            _kw("mama mary", 4, "religious"),
        ),
        help_seeking=(
            _kw("kailangan ng tulong", 6),
            _kw("tulong naman", 7),
            _kw("saklolo", 8),
        ),
    ),
}

KEYWORD_TABLES: Mapping[str, KeywordTable] = MappingProxyType(_TABLES)


def get_keyword_table(language: str) -> tuple[KeywordTable, bool]:
    """
    Look up the keyword table for a language.

    Returns:
        (table, fallback_used) where fallback_used is True when the
        English table stands in for an unsupported language
    """
    table = KEYWORD_TABLES.get(language)
    if table is None:
        return KEYWORD_TABLES["en"], True
    return table, False
