"""
Cultural Profiles

Regional communication profiles, culture-specific distress indicators,
crisis communication patterns and culturally matched resources.

CLINICAL_REVIEW_REQUIRED: Every indicator, weight and profile
attribute must be reviewed with clinicians from the named communities.
Profiles describe communication tendencies, never individuals.
"""

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Mapping, Optional


class StigmaLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FamilyOrientation(StrEnum):
    INDIVIDUAL = "individual"
    FAMILY_CENTERED = "family-centered"
    COMMUNITY_BASED = "community-based"


class CommunicationStyle(StrEnum):
    DIRECT = "direct"
    INDIRECT = "indirect"
    CONTEXTUAL = "contextual"
    METAPHORICAL = "metaphorical"


class ExpressionType(StrEnum):
    VERBAL = "verbal"
    SOMATIC = "somatic"
    BEHAVIORAL = "behavioral"
    METAPHORICAL = "metaphorical"


class HelpSeekingStyle(StrEnum):
    DIRECT = "direct"
    INDIRECT = "indirect"
    COMMUNITY = "community"
    RELIGIOUS = "religious"


@dataclass(frozen=True)
class CulturalProfile:
    """
    Communication profile of one cultural region.

    Attributes:
        region: Region name (e.g. "Hispanic/Latino")
        language: Primary ISO 639-1 language of the region's phrases
        stigma: Mental-health stigma level
        family_orientation: Individual, family-centred or community-based
        communication_style: Direct, indirect or contextual
    """

    region: str
    language: str
    stigma: StigmaLevel
    family_orientation: FamilyOrientation
    communication_style: CommunicationStyle


@dataclass(frozen=True)
class CulturalIndicator:
    """A culture-specific way of expressing distress."""

    phrase: str
    weight: float
    regions: tuple[str, ...]
    communication_style: CommunicationStyle
    expression_type: ExpressionType
    significance: float
    religious: bool = False


@dataclass(frozen=True)
class CommunicationPattern:
    """A crisis communication pattern tied to stigma or help-seeking style."""

    phrase: str
    regions: tuple[str, ...]
    implicitness: float
    stigma: StigmaLevel
    family_implied: bool
    help_seeking_style: HelpSeekingStyle


WESTERN = "Western"
HISPANIC_LATINO = "Hispanic/Latino"
ARABIC = "Arabic"
CHINESE = "Chinese"
VIETNAMESE = "Vietnamese"
FILIPINO = "Filipino"

DEFAULT_REGION = WESTERN

_PROFILES: dict[str, CulturalProfile] = {
    WESTERN: CulturalProfile(
        WESTERN, "en", StigmaLevel.MEDIUM,
        FamilyOrientation.INDIVIDUAL, CommunicationStyle.DIRECT,
    ),
    HISPANIC_LATINO: CulturalProfile(
        HISPANIC_LATINO, "es", StigmaLevel.HIGH,
        FamilyOrientation.FAMILY_CENTERED, CommunicationStyle.CONTEXTUAL,
    ),
    ARABIC: CulturalProfile(
        ARABIC, "ar", StigmaLevel.HIGH,
        FamilyOrientation.FAMILY_CENTERED, CommunicationStyle.INDIRECT,
    ),
    CHINESE: CulturalProfile(
        CHINESE, "zh", StigmaLevel.HIGH,
        FamilyOrientation.FAMILY_CENTERED, CommunicationStyle.INDIRECT,
    ),
    VIETNAMESE: CulturalProfile(
        VIETNAMESE, "vi", StigmaLevel.HIGH,
        FamilyOrientation.FAMILY_CENTERED, CommunicationStyle.INDIRECT,
    ),
    FILIPINO: CulturalProfile(
        FILIPINO, "tl", StigmaLevel.HIGH,
        FamilyOrientation.FAMILY_CENTERED, CommunicationStyle.CONTEXTUAL,
    ),
}

REGION_PROFILES: Mapping[str, CulturalProfile] = MappingProxyType(_PROFILES)

# Lower-cased aliases accepted for a cultural context
REGION_ALIASES: Mapping[str, str] = MappingProxyType({
    "western": WESTERN,
    "en": WESTERN,
    "hispanic/latino": HISPANIC_LATINO,
    "hispanic": HISPANIC_LATINO,
    "latino": HISPANIC_LATINO,
    "latina": HISPANIC_LATINO,
    "latinx": HISPANIC_LATINO,
    "es": HISPANIC_LATINO,
    "arabic": ARABIC,
    "arab": ARABIC,
    "ar": ARABIC,
    "chinese": CHINESE,
    "zh": CHINESE,
    "vietnamese": VIETNAMESE,
    "vi": VIETNAMESE,
    "filipino": FILIPINO,
    "tagalog": FILIPINO,
    "tl": FILIPINO,
    "fil": FILIPINO,
})


def resolve_region(cultural_context: Optional[str]) -> Optional[str]:
    """
    Resolve a cultural context string to a region name.

    Returns:
        Region name, DEFAULT_REGION for unrecognised non-empty
        contexts, or None when no context was supplied
    """
    if cultural_context is None:
        return None
    key = cultural_context.strip().lower().replace("_", "-")
    if not key:
        return None
    if key in REGION_ALIASES:
        return REGION_ALIASES[key]
    base = key.split("-")[0]
    return REGION_ALIASES.get(base, DEFAULT_REGION)


_V = ExpressionType.VERBAL
_S = ExpressionType.SOMATIC
_M = ExpressionType.METAPHORICAL

CULTURAL_INDICATORS: Mapping[str, tuple[CulturalIndicator, ...]] = MappingProxyType({
    WESTERN: (
        CulturalIndicator("i am depressed", 0.7, (WESTERN,), CommunicationStyle.DIRECT, _V, 0.8),
        CulturalIndicator("i need help", 0.8, (WESTERN,), CommunicationStyle.DIRECT, _V, 0.9),
        CulturalIndicator("feeling overwhelmed", 0.6, (WESTERN,), CommunicationStyle.DIRECT, _V, 0.7),
    ),
    HISPANIC_LATINO: (
        CulturalIndicator("me siento mal", 0.8, (HISPANIC_LATINO,), CommunicationStyle.CONTEXTUAL, _S, 0.9),
        CulturalIndicator("no puedo más", 0.9, (HISPANIC_LATINO,), CommunicationStyle.CONTEXTUAL, _V, 0.9),
        CulturalIndicator("dolor en el corazón", 0.7, (HISPANIC_LATINO,), CommunicationStyle.METAPHORICAL, _S, 0.8),
        CulturalIndicator(
            "estoy en las manos de dios", 0.6, (HISPANIC_LATINO,),
            CommunicationStyle.INDIRECT, _M, 0.7, religious=True,
        ),
    ),
    ARABIC: (
        CulturalIndicator(
            "الله يساعدني", 0.8, (ARABIC,), CommunicationStyle.INDIRECT, _V, 0.9, religious=True,
        ),
        CulturalIndicator("قلبي مكسور", 0.7, (ARABIC,), CommunicationStyle.METAPHORICAL, _S, 0.8),
        CulturalIndicator("تعبان نفسياً", 0.9, (ARABIC,), CommunicationStyle.INDIRECT, _S, 0.9),
        CulturalIndicator("مش قادر أكمل", 0.8, (ARABIC,), CommunicationStyle.INDIRECT, _V, 0.8),
    ),
    CHINESE: (
        CulturalIndicator("心里不舒服", 0.8, (CHINESE,), CommunicationStyle.INDIRECT, _S, 0.9),
        CulturalIndicator("压力很大", 0.7, (CHINESE,), CommunicationStyle.INDIRECT, _S, 0.8),
        CulturalIndicator("想不开", 0.9, (CHINESE,), CommunicationStyle.INDIRECT, _M, 0.9),
        CulturalIndicator("活着没意思", 0.9, (CHINESE,), CommunicationStyle.INDIRECT, _V, 0.8),
    ),
    VIETNAMESE: (
        CulturalIndicator("tôi buồn lắm", 0.7, (VIETNAMESE,), CommunicationStyle.INDIRECT, _V, 0.8),
        CulturalIndicator("không có hy vọng", 0.9, (VIETNAMESE,), CommunicationStyle.INDIRECT, _V, 0.9),
        CulturalIndicator("đau lòng quá", 0.8, (VIETNAMESE,), CommunicationStyle.INDIRECT, _S, 0.8),
    ),
    FILIPINO: (
        CulturalIndicator("napakahirap", 0.8, (FILIPINO,), CommunicationStyle.CONTEXTUAL, _V, 0.8),
        CulturalIndicator("walang pag-asa", 0.9, (FILIPINO,), CommunicationStyle.CONTEXTUAL, _V, 0.9),
        CulturalIndicator("sakit sa puso", 0.7, (FILIPINO,), CommunicationStyle.METAPHORICAL, _S, 0.8),
    ),
})

COMMUNICATION_PATTERNS: tuple[CommunicationPattern, ...] = (
    CommunicationPattern(
        "i am thinking about suicide", (WESTERN,), 0.1,
        StigmaLevel.MEDIUM, False, HelpSeekingStyle.DIRECT,
    ),
    CommunicationPattern(
        "la familia no puede saber", (HISPANIC_LATINO,), 0.7,
        StigmaLevel.HIGH, True, HelpSeekingStyle.INDIRECT,
    ),
    CommunicationPattern(
        "dios me ayudará", (HISPANIC_LATINO, FILIPINO), 0.8,
        StigmaLevel.HIGH, False, HelpSeekingStyle.RELIGIOUS,
    ),
    CommunicationPattern(
        "إن شاء الله سيكون أفضل", (ARABIC,), 0.9,
        StigmaLevel.HIGH, False, HelpSeekingStyle.RELIGIOUS,
    ),
    CommunicationPattern(
        "العائلة لا تفهم", (ARABIC,), 0.6,
        StigmaLevel.HIGH, True, HelpSeekingStyle.INDIRECT,
    ),
    CommunicationPattern(
        "家人会担心", (CHINESE,), 0.8,
        StigmaLevel.HIGH, True, HelpSeekingStyle.INDIRECT,
    ),
    CommunicationPattern(
        "不好意思说", (CHINESE, VIETNAMESE), 0.9,
        StigmaLevel.HIGH, False, HelpSeekingStyle.INDIRECT,
    ),
    CommunicationPattern(
        "gia đình sẽ xấu hổ", (VIETNAMESE,), 0.8,
        StigmaLevel.HIGH, True, HelpSeekingStyle.INDIRECT,
    ),
    CommunicationPattern(
        "nakakahiya sa pamilya", (FILIPINO,), 0.7,
        StigmaLevel.HIGH, True, HelpSeekingStyle.COMMUNITY,
    ),
)

REGIONAL_RESOURCES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    WESTERN: (
        "Crisis Text Line: Text HOME to 741741",
        "National Suicide Prevention Lifeline: 988",
        "Psychology Today therapist finder",
    ),
    HISPANIC_LATINO: (
        "Línea Nacional de Prevención del Suicidio: 988",
        "Crisis Text Line: Envía HOLA al 741741",
        "National Alliance on Mental Illness (NAMI) en Español",
        "Therapy for Latinx community resources",
    ),
    ARABIC: (
        "Muslim Mental Health resources",
        "Arab American Family Services",
        "Culturally competent Arabic-speaking therapists",
        "Islamic counseling services",
    ),
    CHINESE: (
        "Chinese Mental Health Association",
        "Asian Mental Health Collective",
        "Mandarin/Cantonese speaking crisis counselors",
        "Traditional Chinese Medicine integration resources",
    ),
    VIETNAMESE: (
        "Vietnamese Community Health Promotion Project",
        "Asian Mental Health resources",
        "Vietnamese-speaking crisis support",
        "Community-based mental health services",
    ),
    FILIPINO: (
        "Filipino Mental Health resources",
        "Kapamilya support networks",
        "Filipino-American community mental health",
        "Cultural counseling services",
    ),
})

LANGUAGE_RESOURCES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "es": (
        "Crisis chat en español disponible 24/7",
        "Consejeros bilingües especializados",
        "Recursos de salud mental en español",
    ),
    "ar": (
        "خدمات الأزمات باللغة العربية",
        "مستشارون يتحدثون العربية",
        "موارد الصحة النفسية الثقافية",
    ),
    "zh": (
        "中文危机干预服务",
        "说中文的心理健康专家",
        "文化敏感的心理健康资源",
    ),
    "vi": (
        "Dịch vụ can thiệp khủng hoảng tiếng Việt",
        "Chuyên gia tâm lý nói tiếng Việt",
        "Tài nguyên sức khỏe tâm thần phù hợp văn hóa",
    ),
    "tl": (
        "Crisis intervention sa Filipino",
        "Filipino-speaking mental health professionals",
        "Kultura-sensitibong mental health resources",
    ),
})

# Regions where religious framing is routinely part of coping
RELIGIOUS_CONSIDERATION_REGIONS: frozenset[str] = frozenset({ARABIC, HISPANIC_LATINO, FILIPINO})
