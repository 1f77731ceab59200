"""Detection services package."""

from crisisguard.services.detection.text_normalizer import NormalizedText, TextNormalizer
from crisisguard.services.detection.lexical_analyzer import LexicalSignalAnalyzer
from crisisguard.services.detection.statistical_analyzer import (
    KeywordRiskScorer,
    RiskScorer,
    ScoreResult,
    StatisticalSignalAnalyzer,
    build_scorer,
)

__all__ = [
    "NormalizedText",
    "TextNormalizer",
    "LexicalSignalAnalyzer",
    "KeywordRiskScorer",
    "RiskScorer",
    "ScoreResult",
    "StatisticalSignalAnalyzer",
    "build_scorer",
]
