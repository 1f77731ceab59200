"""
Text Normalizer & Language Detector

Cleans raw chat text and detects its language before analysis.

ARCHITECTURE: First stage of the pipeline. Every analyzer receives
the same NormalizedText instance. This stage never raises: None,
non-string or empty input yields an empty NormalizedText.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Optional

from crisisguard.config.logging_config import get_logger
from crisisguard.config.settings import DetectionSettings

logger = get_logger(__name__)


@dataclass(frozen=True)
class NormalizedText:
    """
    Input text prepared for analysis.

    Attributes:
        original: Raw input as received (coerced to str)
        text: Cleaned text, case preserved
        lowered: Lower-cased analysis copy of text
        language: Detected (or hinted) ISO 639-1 language code
        language_confidence: Confidence in the detected language
        mixed_language: Whether a second language was also detected
        secondary_language: The second language, when mixed
        truncated: Whether the middle of the text was cut to fit max_text_length
    """

    original: str
    text: str
    lowered: str
    language: str = "en"
    language_confidence: float = 0.0
    mixed_language: bool = False
    secondary_language: Optional[str] = None
    truncated: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.text

    @classmethod
    def empty(cls) -> "NormalizedText":
        return cls(original="", text="", lowered="")


# Characters stripped before analysis
_ZERO_WIDTH = re.compile("[\u200b\u200c\u200d\u2060\ufeff\u00ad]")
_WHITESPACE = re.compile(r"\s+")
TRUNCATION_MARKER = " ... "
_QUOTE_FOLDING = str.maketrans({
    "\u2018": "'",
    "\u2019": "'",
    "\u201b": "'",
    "\u2032": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u201e": '"',
})

# Script ranges checked before any marker words
SCRIPT_PATTERNS: dict[str, re.Pattern] = {
    "zh": re.compile("[\u4e00-\u9fff]"),
    "ar": re.compile("[\u0600-\u06ff]"),
    "he": re.compile("[\u0590-\u05ff]"),
    "ru": re.compile("[\u0400-\u04ff]"),
    "hi": re.compile("[\u0900-\u097f]"),
}

_LATIN_LETTER = re.compile("[a-zA-Z\u00c0-\u024f\u1e00-\u1eff]")

# Marker words for Latin-script languages
MARKER_WORDS: dict[str, re.Pattern] = {
    "en": re.compile(
        r"\b(?:the|and|i|i'm|my|me|to|is|am|you|want|feel|feeling|myself|"
        r"about|can't|don't|going|with|have|just)\b"
    ),
    "es": re.compile(
        r"\b(?:quiero|terminar|vida|morir|puedo|más|muy|triste|estoy|"
        r"tengo|siento|nadie|ayuda|porque|pero|soy)\b"
    ),
    "pt": re.compile(
        r"\b(?:não|você|estou|muito|quero|morrer|aguento|sozinho|sozinha|"
        r"preciso|ajuda|tô|mais|sou|minha)\b"
    ),
    "fr": re.compile(
        r"\b(?:je|suis|pas|très|vie|mourir|veux|aide|moi|plus|rien|"
        r"personne|seul|seule)\b"
    ),
    "de": re.compile(
        r"\b(?:ich|nicht|bin|sehr|leben|sterben|möchte|hilfe|mehr|"
        r"niemand|allein|kann|mich)\b"
    ),
    "vi": re.compile(
        r"\b(?:tôi|không|muốn|chết|buồn|lắm|quá|được|giúp|một|mình|"
        r"cuộc|sống)\b"
    ),
    "tl": re.compile(
        r"\b(?:ako|hindi|naman|gusto|kong|mamatay|walang|sarili|na|"
        r"ko|ang|sa|talaga|tulong)\b"
    ),
}

# Letters that only (or mostly) appear in one Latin-script language
DISTINCTIVE_LETTERS: dict[str, re.Pattern] = {
    "es": re.compile(r"[ñ¿¡]"),
    "pt": re.compile(r"[ãõç]"),
    "fr": re.compile(r"[èêëîïœ]"),
    "de": re.compile(r"[äöüß]"),
    "vi": re.compile(
        r"[ăđơưạảấầẩẫậắằẳẵặẹẻẽếềểễệỉịọỏốồổỗộớờởỡợụủứừửữựỳỵỷỹ]"
    ),
}

SCRIPT_CONFIDENCE = 0.9
FALLBACK_CONFIDENCE = 0.5


class TextNormalizer:
    """
    Normalizes text and detects language.

    Detection order:
    1. A supplied language hint wins (confidence 1.0)
    2. Non-Latin scripts (CJK, Arabic, Hebrew, Cyrillic, Devanagari)
    3. Latin-script marker words and distinctive letters
    4. Fallback to English (confidence 0.5)

    Usage:
        normalizer = TextNormalizer(settings.detection)
        normalized = normalizer.normalize("No puedo más")
        normalized.language  # "es"
    """

    def __init__(self, settings: Optional[DetectionSettings] = None) -> None:
        self._settings = settings or DetectionSettings()

    def normalize(
        self,
        text: Any,
        language_hint: Optional[str] = None,
    ) -> NormalizedText:
        """
        Clean text and detect its language.

        Args:
            text: Raw input; anything that is not a str yields empty text
            language_hint: Optional ISO language code ("es", "pt-BR")

        Returns:
            NormalizedText, never raises
        """
        if not isinstance(text, str):
            if text is not None:
                logger.warning(
                    "Non-string input to normalizer",
                    input_type=type(text).__name__,
                )
            return NormalizedText.empty()

        try:
            cleaned, truncated = self._clean(text)
        except (TypeError, ValueError) as e:
            logger.warning("Text normalization failed", error=str(e))
            return NormalizedText.empty()

        if not cleaned:
            return NormalizedText(original=text, text="", lowered="")

        lowered = cleaned.lower()
        language, confidence, secondary = self._detect_language(lowered, language_hint)

        return NormalizedText(
            original=text,
            text=cleaned,
            lowered=lowered,
            language=language,
            language_confidence=confidence,
            mixed_language=secondary is not None,
            secondary_language=secondary,
            truncated=truncated,
        )

    def _clean(self, text: str) -> tuple[str, bool]:
        cleaned = unicodedata.normalize("NFKC", text)
        cleaned = _ZERO_WIDTH.sub("", cleaned)
        cleaned = cleaned.translate(_QUOTE_FOLDING)
        cleaned = _WHITESPACE.sub(" ", cleaned).strip()

        max_length = self._settings.max_text_length
        if len(cleaned) <= max_length:
            return cleaned, False

        # Keep both ends of the message, drop the middle
        budget = max_length - len(TRUNCATION_MARKER)
        head = budget // 2
        tail = budget - head
        return cleaned[:head] + TRUNCATION_MARKER + cleaned[-tail:], True

    def _detect_language(
        self,
        lowered: str,
        language_hint: Optional[str],
    ) -> tuple[str, float, Optional[str]]:
        """Return (language, confidence, secondary language or None)."""
        scores = self._score_languages(lowered)
        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
        total = sum(scores.values())

        if language_hint:
            hinted = language_hint.strip().lower().replace("_", "-").split("-")[0]
            if hinted:
                secondary = self._secondary(ranked, total, exclude=hinted)
                return hinted, 1.0, secondary

        if not ranked or ranked[0][1] <= 0:
            return "en", FALLBACK_CONFIDENCE, None

        primary, primary_score = ranked[0]
        if primary in SCRIPT_PATTERNS:
            confidence = SCRIPT_CONFIDENCE
        else:
            word_count = max(1, len(lowered.split()))
            ratio = primary_score / word_count
            confidence = round(min(0.85, FALLBACK_CONFIDENCE + ratio * 0.7), 3)

        return primary, confidence, self._secondary(ranked, total, exclude=primary)

    def _secondary(
        self,
        ranked: list[tuple[str, float]],
        total: float,
        exclude: str,
    ) -> Optional[str]:
        if total <= 0:
            return None
        threshold = self._settings.mixed_language_threshold
        for language, score in ranked:
            if language == exclude or score <= 0:
                continue
            if score / total >= threshold:
                return language
            break
        return None

    @staticmethod
    def _score_languages(lowered: str) -> dict[str, float]:
        """
        Score every known language on the text.

        Script languages score one point per character in their range.
        Latin languages score one point per marker word plus half a
        point per distinctive letter.
        """
        scores: dict[str, float] = {}

        for language, pattern in SCRIPT_PATTERNS.items():
            count = len(pattern.findall(lowered))
            if count:
                scores[language] = float(count)

        if not _LATIN_LETTER.search(lowered):
            return scores

        for language, pattern in MARKER_WORDS.items():
            hits = float(len(pattern.findall(lowered)))
            letters = DISTINCTIVE_LETTERS.get(language)
            if letters is not None:
                hits += 0.5 * len(letters.findall(lowered))
            if hits:
                scores[language] = hits

        return scores
