"""
Transformer Risk Scorer

HuggingFace Transformers implementation of the RiskScorer contract,
using a natural-language-inference model for zero-shot crisis
classification.

Requires the "ml" extra (torch, transformers). Selected with
CRISISGUARD_STATISTICAL_SCORER_BACKEND=transformers.

CLINICAL_REVIEW_REQUIRED: Candidate labels, their severity mapping
and the model itself must be validated against clinical benchmarks
before being enabled in production.
"""

import asyncio
from typing import Optional

import torch
from transformers import AutoModelForSequenceClassification, AutoTokenizer

from crisisguard.config.logging_config import get_logger
from crisisguard.domain.enums.crisis_severity import CrisisSeverity, InterventionUrgency
from crisisguard.domain.exceptions import ScorerError
from crisisguard.services.detection.statistical_analyzer import (
    RealTimeRisk,
    RiskScorer,
    ScoreResult,
)

logger = get_logger(__name__)


class TransformerRiskScorer(RiskScorer):
    """
    Zero-shot NLI scorer.

    Each candidate label is tested as an entailment hypothesis. The
    label with the highest entailment probability decides severity;
    its probability times the label weight gives immediate risk.
    """

    # Candidate label -> (severity, risk weight)
    CANDIDATE_LABELS: dict[str, tuple[CrisisSeverity, float]] = {
        "suicidal intent": (CrisisSeverity.EMERGENCY, 1.0),
        "threat of violence toward others": (CrisisSeverity.EMERGENCY, 0.95),
        "self-harm": (CrisisSeverity.HIGH, 0.8),
        "hopelessness": (CrisisSeverity.MODERATE, 0.6),
        "emotional distress": (CrisisSeverity.LOW, 0.35),
        "everyday conversation": (CrisisSeverity.NONE, 0.0),
    }

    HYPOTHESIS_TEMPLATE = "This text expresses {}."

    def __init__(
        self,
        model_name: str = "facebook/bart-large-mnli",
        device: Optional[str] = None,
    ) -> None:
        self._model_name = model_name
        self._device = device or ("cuda" if torch.cuda.is_available() else "cpu")
        self._model: Optional[AutoModelForSequenceClassification] = None
        self._tokenizer: Optional[AutoTokenizer] = None
        self._entailment_index = 2
        self._contradiction_index = 0
        self._loaded = False

    @property
    def name(self) -> str:
        return f"transformers:{self._model_name}"

    async def load(self) -> None:
        """Load model and tokenizer."""
        if self._loaded:
            return
        await asyncio.to_thread(self._load_sync)

    def _load_sync(self) -> None:
        self._tokenizer = AutoTokenizer.from_pretrained(self._model_name)
        self._model = AutoModelForSequenceClassification.from_pretrained(
            self._model_name
        ).to(self._device)
        self._model.eval()

        label2id = {k.lower(): v for k, v in self._model.config.label2id.items()}
        self._entailment_index = label2id.get("entailment", self._entailment_index)
        self._contradiction_index = label2id.get("contradiction", self._contradiction_index)
        self._loaded = True

        logger.info("Transformer scorer loaded", model=self._model_name, device=self._device)

    def is_loaded(self) -> bool:
        return self._loaded and self._model is not None

    async def score(self, text: str, language: str) -> ScoreResult:
        try:
            if not self.is_loaded():
                await self.load()
            probabilities = await asyncio.to_thread(self._entailment_probabilities, text)
        except (OSError, RuntimeError, ValueError) as e:
            raise ScorerError(
                f"Transformer inference failed: {type(e).__name__}",
                scorer=self.name,
                is_retryable=isinstance(e, RuntimeError),
                original_error=e,
            ) from e

        label, probability = max(probabilities.items(), key=lambda item: item[1])
        severity, weight = self.CANDIDATE_LABELS[label]
        immediate = min(100.0, probability * weight * 100)

        return ScoreResult(
            severity_level=severity,
            confidence=probability,
            real_time_risk=RealTimeRisk(
                immediate=immediate,
                short_term=immediate * 0.8,
                long_term=immediate * 0.6,
                urgency=InterventionUrgency.from_risk(immediate, severity),
            ),
            risk_indicators=tuple(
                name for name, p in probabilities.items()
                if p >= 0.5 and self.CANDIDATE_LABELS[name][0] > CrisisSeverity.NONE
            ),
        )

    def _entailment_probabilities(self, text: str) -> dict[str, float]:
        labels = list(self.CANDIDATE_LABELS)
        hypotheses = [self.HYPOTHESIS_TEMPLATE.format(label) for label in labels]

        inputs = self._tokenizer(
            [text] * len(hypotheses),
            hypotheses,
            return_tensors="pt",
            truncation="only_first",
            max_length=512,
            padding=True,
        ).to(self._device)

        with torch.no_grad():
            logits = self._model(**inputs).logits

        # Entailment vs contradiction per hypothesis
        pair = logits[:, [self._contradiction_index, self._entailment_index]]
        entailment = torch.nn.functional.softmax(pair, dim=-1)[:, 1]
        values = entailment.cpu().tolist()
        return dict(zip(labels, (float(v) for v in values)))
