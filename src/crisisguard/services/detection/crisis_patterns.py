"""
Crisis Pattern Table

Curated lexical crisis patterns keyed by language.

SAFETY-CRITICAL: These patterns decide which phrases are read as
suicide intent, self-harm, violence or medical emergency.

CLINICAL_REVIEW_REQUIRED: Every pattern, weight and flag word must
be reviewed by crisis-intervention professionals before changes ship.

ARCHITECTURE: The table is built once at startup and validated.
A missing or empty table is a ConfigurationError (fatal at startup,
never mid-request). English carries the full contextual table; the
other supported languages carry their urgent keyword phrases.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from crisisguard.domain.enums.crisis_severity import CrisisCategory, CrisisSeverity
from crisisguard.domain.exceptions import ConfigurationError

DEFAULT_LANGUAGE = "en"

# Languages written without spaces between words; phrase matching
# falls back to plain substring search for these.
UNSEGMENTED_LANGUAGES: frozenset[str] = frozenset({"zh", "ja"})

# Base confidence by the label of the six-level clinical scale.
BASE_CONFIDENCE: dict[str, float] = {
    "emergency": 0.75,
    "critical": 0.65,
}
DEFAULT_BASE_CONFIDENCE = 0.5

AMPLIFIER_BONUS = 0.15
HYPOTHETICAL_PENALTY = 0.5
CONTEXT_BONUS = 0.2

HYPOTHETICAL_PHRASES: tuple[str, ...] = (
    "if i were to",
    "would never actually",
    "hypothetically",
    "just thinking about",
)

# Negations that cancel a match starting within 50 chars of their end
NEGATION_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(
        r"\b(?:don't|dont|do not|never|wouldn't|would not|won't|will not)\s+"
        r"(?:have|want|plan|intend|going)\s*(?:to|a)?\s*"
    ),
    re.compile(r"\b(?:not|never)\s+(?:planning|going|intending|wanting)\s*(?:to)?\s*"),
    re.compile(r"\b(?:would|could)\s+never\s*"),
    re.compile(r"\b(?:no)\s+(?:plan|intent|intention|desire)\s*(?:to)?\s*"),
    re.compile(r"\b(?:don't|dont|do not)\s+(?:have a plan|want to)\s*"),
)
NEGATION_REACH_CHARS = 50

# Points added to a pattern's risk weight per timeline indicator
TIMELINE_BONUS: dict[str, int] = {
    "immediate": 30,
    "very-urgent": 20,
    "urgent": 15,
    "concerning": 10,
    "planning": 25,
}


@dataclass(frozen=True)
class CrisisPattern:
    """
    One contextual crisis pattern.

    Attributes:
        name: Stable identifier
        regex: Compiled pattern, applied to lower-cased text
        description: Human-readable description
        severity: Severity bucket of a confirmed match
        category: Clinical category
        base_confidence: Starting confidence before calibration
        context_requirements: Any one present adds CONTEXT_BONUS
        negative_flags: Any one present in the window cancels the match
        amplifiers: Each one present adds AMPLIFIER_BONUS
        timeline_indicators: Time words that raise urgency for this pattern
        emotional_indicators: Emotion words typical of this pattern
        risk_weight: Base urgency score (0-100)
        intervention_required: Whether a match alone demands a human
    """

    name: str
    regex: re.Pattern
    description: str
    severity: CrisisSeverity
    category: CrisisCategory
    base_confidence: float
    context_requirements: tuple[str, ...] = ()
    negative_flags: tuple[str, ...] = ()
    amplifiers: tuple[str, ...] = ()
    timeline_indicators: tuple[str, ...] = ()
    emotional_indicators: tuple[str, ...] = ()
    risk_weight: int = 50
    intervention_required: bool = False


@dataclass(frozen=True)
class LanguageProfile:
    """Pattern set and calibration vocabulary for one language."""

    language: str
    patterns: tuple[CrisisPattern, ...]
    timeline_indicators: Mapping[str, tuple[str, ...]]
    use_negation_patterns: bool = False


def _pattern(
    name: str,
    regex: str,
    description: str,
    label: str,
    category: CrisisCategory,
    risk_weight: int,
    context: tuple[str, ...] = (),
    negative: tuple[str, ...] = (),
    amplifiers: tuple[str, ...] = (),
    timeline: tuple[str, ...] = (),
    emotional: tuple[str, ...] = (),
) -> CrisisPattern:
    """Build a pattern from a six-level severity label."""
    return CrisisPattern(
        name=name,
        regex=re.compile(regex, re.IGNORECASE),
        description=description,
        severity=CrisisSeverity.from_label(label),
        category=category,
        base_confidence=BASE_CONFIDENCE.get(label, DEFAULT_BASE_CONFIDENCE),
        context_requirements=context,
        negative_flags=negative,
        amplifiers=amplifiers,
        timeline_indicators=timeline,
        emotional_indicators=emotional,
        risk_weight=risk_weight,
        intervention_required=label in BASE_CONFIDENCE,
    )


ENGLISH_PATTERNS: tuple[CrisisPattern, ...] = (
    _pattern(
        "immediate_suicide_intent",
        r"(?:going to|about to|ready to|planning to|i'm going to|i am going to)\s*"
        r"(?:kill myself|end my life|commit suicide|take my own life)",
        "Immediate suicide intent with action planning",
        "emergency",
        CrisisCategory.SUICIDE_PLAN,
        100,
        context=("tonight", "today", "now", "soon", "ready", "planned", "everything"),
        negative=("not", "never", "would never", "could never", "hypothetically"),
        amplifiers=("definitely", "absolutely", "certainly", "finally", "done waiting", "ready"),
        timeline=("tonight", "today", "this evening", "in an hour", "soon"),
        emotional=("hopeless", "empty", "done", "can't take it", "over it"),
    ),
    _pattern(
        "suicide_plan_details",
        r"(?:have a plan|suicide plan|know how|know exactly how|figured out how|decided how)"
        r"\s*(?:to|i'm going to|i will|\.|$)",
        "Specific suicide planning with method consideration",
        "emergency",
        CrisisCategory.SUICIDE_PLAN,
        95,
        context=("method", "when", "where", "how", "plan", "decided", "exactly", "suicide"),
        negative=("no plan", "don't have", "not planning", "just thinking"),
        amplifiers=("detailed", "specific", "ready", "prepared", "set", "exactly"),
        timeline=("tonight", "tomorrow", "this week", "soon", "when", "time comes"),
        emotional=("calm", "peaceful", "resolved", "certain", "clear"),
    ),
    _pattern(
        "direct_suicide_intent",
        r"(?:i want to|i need to|i'm going to|going to)\s*"
        r"(?:kill myself|end my life|commit suicide|take my life)",
        "Direct suicide intent statement",
        "emergency",
        CrisisCategory.SUICIDAL_IDEATION,
        95,
        context=("tonight", "today", "now", "need", "want", "going"),
        negative=("not", "never", "don't", "wouldn't"),
        amplifiers=("really", "definitely", "tonight", "today", "now"),
        timeline=("tonight", "today", "now", "soon", "immediately"),
        emotional=("desperate", "done", "finished", "can't"),
    ),
    _pattern(
        "active_suicidal_ideation",
        r"(?:want to die|wish i was dead|don't want to be alive|better off dead|"
        r"life isn't worth living|think about it constantly|tired of living)",
        "Active suicidal ideation with death wish",
        "critical",
        CrisisCategory.SUICIDAL_IDEATION,
        85,
        context=("really", "so badly", "constantly", "all the time", "tired", "think about"),
        negative=("sometimes feel like", "used to", "never actually"),
        amplifiers=("desperately", "so badly", "constantly", "every day", "really", "so tired"),
        timeline=("lately", "recently", "for weeks", "every day"),
        emotional=("hopeless", "exhausted", "empty", "worthless", "tired"),
    ),
    _pattern(
        "self_harm_mention",
        r"(?:hurt myself|harm myself|self.?harm|cutting myself|hurting myself)",
        "Self-harm mentions",
        "high",
        CrisisCategory.SELF_HARM,
        60,
        negative=(
            "don't", "not", "never", "would never", "wouldn't",
            "no plan", "don't have", "don't have a plan",
        ),
        amplifiers=("want to", "going to", "plan to", "need to"),
    ),
    _pattern(
        "self_harm_escalation",
        r"(?:cutting deeper|hurting myself more|escalating|getting worse|can't stop|"
        r"cuts are getting deeper|self-harm is getting worse)\s*(?:cutting|harming|hurting)?",
        "Self-harm with escalation patterns",
        "high",
        CrisisCategory.SELF_HARM,
        80,
        context=("more", "worse", "deeper", "harder", "frequently", "cutting", "cuts"),
        negative=("used to", "stopped", "trying not to"),
        amplifiers=("desperately", "compulsively", "addicted to", "can't control", "deeper", "worse"),
        timeline=("lately", "recently", "tonight", "daily"),
        emotional=("numb", "desperate", "out of control", "need to"),
    ),
    _pattern(
        "substance_suicidal_intent",
        r"(?:drinking to die|using to|overdose|taking too many|mixing pills|"
        r"hoping i won't wake up|won't wake up tomorrow)",
        "Substance use with suicidal intent",
        "emergency",
        CrisisCategory.SUBSTANCE_CRISIS,
        90,
        context=("to die", "to escape", "hoping", "trying", "wake up", "tomorrow", "drinking"),
        negative=("afraid of", "worried about", "don't want to"),
        amplifiers=("hoping", "trying", "planning", "ready", "won't wake"),
        timeline=("tonight", "now", "about to", "going to", "tomorrow"),
        emotional=("hopeless", "desperate", "done", "empty"),
    ),
    _pattern(
        "medical_emergency",
        r"(?:took too many|overdosed|can't stop bleeding|chest pain|too many pills|bleeding from)",
        "Immediate medical emergency situation",
        "emergency",
        CrisisCategory.MEDICAL_EMERGENCY,
        100,
        context=("just", "now", "happening", "right now", "pills", "cuts", "bleeding"),
        negative=("worry about", "afraid of", "what if"),
        amplifiers=("just", "right now", "happening", "emergency", "took"),
        timeline=("now", "just", "currently", "right now"),
        emotional=("scared", "panicked", "confused", "desperate"),
    ),
    _pattern(
        "violence_threat",
        r"\b(?:going to hurt|planning to hurt|thinking about hurting|want to hurt|kill|harm|hurt)"
        r"\s+(?:someone|people|others|them|him|her)\b",
        "Threats of violence toward others",
        "emergency",
        CrisisCategory.VIOLENCE_THREAT,
        95,
        context=("thinking", "about", "hurting", "others", "also"),
        negative=("would never", "could never", "just angry"),
        amplifiers=("planning", "ready", "deserve", "have to", "tonight", "coming"),
        timeline=("tonight", "tomorrow", "soon", "when i see"),
        emotional=("rage", "angry", "hatred", "vindictive"),
    ),
    _pattern(
        "severe_psychological_distress",
        r"(?:i'm losing my mind|i am losing my mind|losing my mind|going crazy|"
        r"can't think straight|hearing voices|seeing things)",
        "Severe psychological distress or psychotic symptoms",
        "high",
        CrisisCategory.PSYCHOTIC_EPISODE,
        80,
        context=("losing", "mind"),
        negative=("feel like", "seems like", "metaphorically"),
        amplifiers=("actually", "literally", "really", "definitely"),
        timeline=("lately", "for days", "constantly", "right now"),
        emotional=("confused", "scared", "paranoid", "disconnected"),
    ),
    _pattern(
        "panic_crisis",
        r"(?:panic attack|heart racing|going to die|losing control|overwhelming panic)",
        "Severe panic or anxiety crisis",
        "high",
        CrisisCategory.PANIC_CRISIS,
        35,
        context=("right now", "happening", "can't stop", "overwhelming", "panic", "anxiety"),
        negative=("sometimes", "used to have", "worried about"),
        amplifiers=("right now", "overwhelming", "can't control", "severe"),
        timeline=("now", "right now", "currently", "happening"),
        emotional=("terrified", "panicked", "overwhelmed", "desperate"),
    ),
    _pattern(
        "breathing_difficulty",
        r"(?:can't breathe|cannot breathe|trouble breathing|difficulty breathing)",
        "Breathing difficulty (likely panic-related)",
        "high",
        CrisisCategory.PANIC_CRISIS,
        30,
        context=("panic", "anxiety", "overwhelming", "attack"),
        negative=("sometimes", "used to", "worried about", "medical"),
        amplifiers=("right now", "properly", "at all"),
        timeline=("now", "right now", "currently"),
        emotional=("panicked", "anxious", "overwhelmed"),
    ),
    _pattern(
        "abuse_disclosure",
        r"(?:being abused|someone is hurting me|someone is still hurting me|hurting me at home|"
        r"forced me|threatened me|unsafe at home|not safe)",
        "Disclosure of abuse or unsafe situation",
        "critical",
        CrisisCategory.ABUSE_DISCLOSURE,
        85,
        context=("currently", "still", "ongoing", "happening", "home", "every day", "safe"),
        negative=("in the past", "used to", "worried about"),
        amplifiers=("still", "ongoing", "every day", "getting worse", "happening"),
        timeline=("now", "still", "ongoing", "every day"),
        emotional=("scared", "trapped", "helpless", "afraid"),
    ),
)

ENGLISH_TIMELINE: dict[str, tuple[str, ...]] = {
    "immediate": ("now", "right now", "currently", "as we speak", "this moment"),
    "very-urgent": ("tonight", "today", "this evening", "in an hour", "soon"),
    "urgent": ("tomorrow", "this week", "in a few days", "by weekend"),
    "concerning": ("next week", "soon", "eventually", "when i get chance"),
    "planning": ("been planning", "have planned", "working on plan", "thinking about when"),
}


@dataclass(frozen=True)
class _KeywordSpec:
    """Urgent keyword phrase for a non-English language."""

    phrase: str
    label: str
    category: CrisisCategory
    risk_weight: int


@dataclass(frozen=True)
class _LanguageVocabulary:
    keywords: tuple[_KeywordSpec, ...]
    timeline: dict[str, tuple[str, ...]]
    negative: tuple[str, ...]
    amplifiers: tuple[str, ...]


_SI = CrisisCategory.SUICIDAL_IDEATION
_SH = CrisisCategory.SELF_HARM
_SD = CrisisCategory.SEVERE_DISTRESS

# Keyword weight 10 reads as emergency, 9 as critical, 8 as high.
_VOCABULARIES: dict[str, _LanguageVocabulary] = {
    "es": _LanguageVocabulary(
        keywords=(
            _KeywordSpec("suicidio", "emergency", _SI, 95),
            _KeywordSpec("matarme", "emergency", _SI, 95),
            _KeywordSpec("quitarme la vida", "emergency", _SI, 95),
            _KeywordSpec("quiero morir", "critical", _SI, 85),
            _KeywordSpec("no puedo más", "high", _SD, 70),
            _KeywordSpec("sin salida", "high", _SD, 70),
            _KeywordSpec("autolesión", "high", _SH, 60),
        ),
        timeline={
            "immediate": ("ahora", "ahora mismo", "ya"),
            "very-urgent": ("esta noche", "hoy", "pronto"),
            "urgent": ("mañana", "esta semana"),
        },
        negative=("nunca", "jamás", "no quiero", "no voy a"),
        amplifiers=("de verdad", "definitivamente", "ya decidí"),
    ),
    "pt": _LanguageVocabulary(
        keywords=(
            _KeywordSpec("suicídio", "emergency", _SI, 95),
            _KeywordSpec("me matar", "emergency", _SI, 95),
            _KeywordSpec("tirar a vida", "emergency", _SI, 95),
            _KeywordSpec("quero morrer", "critical", _SI, 85),
            _KeywordSpec("não aguento mais", "high", _SD, 70),
            _KeywordSpec("sem saída", "high", _SD, 70),
            _KeywordSpec("autolesão", "high", _SH, 60),
        ),
        timeline={
            "immediate": ("agora", "agora mesmo", "já"),
            "very-urgent": ("esta noite", "hoje", "logo"),
            "urgent": ("amanhã", "esta semana"),
        },
        negative=("nunca", "jamais", "não quero", "não vou"),
        amplifiers=("de verdade", "definitivamente", "já decidi"),
    ),
    "ar": _LanguageVocabulary(
        keywords=(
            _KeywordSpec("انتحار", "emergency", _SI, 95),
            _KeywordSpec("أقتل نفسي", "emergency", _SI, 95),
            _KeywordSpec("أريد أن أموت", "critical", _SI, 85),
            _KeywordSpec("لا أستطيع المتابعة", "high", _SD, 70),
            _KeywordSpec("لا مخرج", "high", _SD, 70),
            _KeywordSpec("إيذاء النفس", "high", _SH, 60),
        ),
        timeline={
            "immediate": ("الآن",),
            "very-urgent": ("الليلة", "اليوم"),
            "urgent": ("غدا", "هذا الأسبوع"),
        },
        negative=("لن", "لا أريد"),
        amplifiers=("حقا", "بالتأكيد"),
    ),
    "zh": _LanguageVocabulary(
        keywords=(
            _KeywordSpec("自杀", "emergency", _SI, 95),
            _KeywordSpec("杀死自己", "emergency", _SI, 95),
            _KeywordSpec("想死", "critical", _SI, 85),
            _KeywordSpec("活不下去", "high", _SD, 70),
            _KeywordSpec("没有出路", "high", _SD, 70),
            _KeywordSpec("自伤", "high", _SH, 60),
        ),
        timeline={
            "immediate": ("现在", "马上"),
            "very-urgent": ("今晚", "今天"),
            "urgent": ("明天", "这周"),
        },
        negative=("不会", "不想"),
        amplifiers=("真的", "一定"),
    ),
    "vi": _LanguageVocabulary(
        keywords=(
            _KeywordSpec("tự tử", "emergency", _SI, 95),
            _KeywordSpec("giết mình", "emergency", _SI, 95),
            _KeywordSpec("muốn chết", "critical", _SI, 85),
            _KeywordSpec("không thể tiếp tục", "high", _SD, 70),
            _KeywordSpec("không có lối thoát", "high", _SD, 70),
            _KeywordSpec("tự hại", "high", _SH, 60),
        ),
        timeline={
            "immediate": ("bây giờ", "ngay"),
            "very-urgent": ("tối nay", "hôm nay"),
            "urgent": ("ngày mai", "tuần này"),
        },
        negative=("không muốn", "sẽ không"),
        amplifiers=("thật sự", "chắc chắn"),
    ),
    "tl": _LanguageVocabulary(
        keywords=(
            _KeywordSpec("magpakamatay", "emergency", _SI, 95),
            _KeywordSpec("patayin ang sarili", "emergency", _SI, 95),
            _KeywordSpec("gusto kong mamatay", "critical", _SI, 85),
            _KeywordSpec("hindi na kaya", "high", _SD, 70),
            _KeywordSpec("walang labas", "high", _SD, 70),
            _KeywordSpec("saktan ang sarili", "high", _SH, 60),
        ),
        timeline={
            "immediate": ("ngayon", "ngayon na"),
            "very-urgent": ("mamaya", "ngayong gabi"),
            "urgent": ("bukas",),
        },
        negative=("ayoko", "hindi ko gagawin"),
        amplifiers=("talaga", "sigurado"),
    ),
}


def _keyword_patterns(language: str, vocabulary: _LanguageVocabulary) -> tuple[CrisisPattern, ...]:
    time_words = tuple(
        word for words in vocabulary.timeline.values() for word in words
    )
    unsegmented = language in UNSEGMENTED_LANGUAGES
    patterns = []
    for index, spec in enumerate(vocabulary.keywords):
        escaped = re.escape(spec.phrase)
        regex = escaped if unsegmented else rf"(?<!\w){escaped}(?!\w)"
        patterns.append(
            _pattern(
                f"{language}_urgent_{index}",
                regex,
                f"Urgent crisis phrase ({language})",
                spec.label,
                spec.category,
                spec.risk_weight,
                context=time_words,
                negative=vocabulary.negative,
                amplifiers=vocabulary.amplifiers,
                timeline=time_words,
            )
        )
    return tuple(patterns)


def build_pattern_table() -> Mapping[str, LanguageProfile]:
    """
    Build the per-language pattern table.

    Returns:
        Read-only mapping of language code to LanguageProfile

    Raises:
        ConfigurationError: If the table is empty or lacks English
    """
    table: dict[str, LanguageProfile] = {
        DEFAULT_LANGUAGE: LanguageProfile(
            language=DEFAULT_LANGUAGE,
            patterns=ENGLISH_PATTERNS,
            timeline_indicators=MappingProxyType(ENGLISH_TIMELINE),
            use_negation_patterns=True,
        ),
    }
    for language, vocabulary in _VOCABULARIES.items():
        table[language] = LanguageProfile(
            language=language,
            patterns=_keyword_patterns(language, vocabulary),
            timeline_indicators=MappingProxyType(vocabulary.timeline),
        )

    validate_pattern_table(table)
    return MappingProxyType(table)


def validate_pattern_table(table: Mapping[str, LanguageProfile]) -> None:
    """Raise ConfigurationError for an unusable pattern table."""
    if not table:
        raise ConfigurationError("Crisis pattern table is empty")
    if DEFAULT_LANGUAGE not in table:
        raise ConfigurationError(
            f"Crisis pattern table has no '{DEFAULT_LANGUAGE}' fallback profile"
        )
    for language, profile in table.items():
        if not profile.patterns:
            raise ConfigurationError(f"No crisis patterns configured for '{language}'")
        for pattern in profile.patterns:
            if not 0 <= pattern.risk_weight <= 100:
                raise ConfigurationError(
                    f"Pattern {pattern.name} has risk weight outside 0-100"
                )


@lru_cache(maxsize=1024)
def _phrase_regex(phrase: str) -> re.Pattern:
    return re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)")


def contains_phrase(text: str, phrase: str, language: str = DEFAULT_LANGUAGE) -> bool:
    """
    Check whether a phrase occurs in text as whole words.

    Unsegmented languages (Chinese) use plain substring search.
    Both arguments are expected lower-cased.
    """
    if not phrase:
        return False
    if language in UNSEGMENTED_LANGUAGES:
        return phrase in text
    return _phrase_regex(phrase).search(text) is not None


def count_phrases(text: str, phrases: tuple[str, ...], language: str = DEFAULT_LANGUAGE) -> int:
    """Count how many of the phrases occur in text."""
    return sum(1 for phrase in phrases if contains_phrase(text, phrase, language))


def contains_unnegated_phrase(
    text: str,
    phrase: str,
    language: str = DEFAULT_LANGUAGE,
) -> bool:
    """
    Check whether a phrase occurs at least once outside a negation.

    An occurrence starting within NEGATION_REACH_CHARS of the end of a
    negation ("not going to", "would never") does not count.
    """
    if not phrase:
        return False
    if language in UNSEGMENTED_LANGUAGES:
        return phrase in text

    negations = [n for pattern in NEGATION_PATTERNS for n in pattern.finditer(text)]
    for occurrence in _phrase_regex(phrase).finditer(text):
        start = occurrence.start()
        if not any(n.start() <= start <= n.end() + NEGATION_REACH_CHARS for n in negations):
            return True
    return False
