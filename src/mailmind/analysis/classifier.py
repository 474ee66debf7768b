"""Email classification with the LLM."""

import json
import logging
import re
from dataclasses import dataclass

from ..exceptions import LLMUnavailableError
from ..storage.models import Classification, Confidence
from .llm import LLMClient
from .prompts import CLASSIFICATION_SYSTEM_PROMPT, build_classification_prompt

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

ALLOWED_CLASSIFICATIONS = {c.value for c in Classification}
ALLOWED_CONFIDENCES = {c.value for c in Confidence}


@dataclass
class ClassificationResult:
    """Category and confidence assigned to an email."""

    classification: str
    confidence: str


FALLBACK_RESULT = ClassificationResult(
    classification=Classification.TASK.value,
    confidence=Confidence.LOW.value,
)


def parse_classification(response_text: str) -> ClassificationResult:
    """Parse the classifier's reply.

    The first ``{...}`` object in the reply is used. Unknown categories fall
    back to ``task`` and unknown confidences to ``medium``; a reply without
    a parseable object yields (``task``, ``low``).

    Args:
        response_text: Raw reply text.

    Returns:
        Parsed classification.
    """
    match = _JSON_OBJECT.search(response_text or "")
    if not match:
        return FALLBACK_RESULT

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse classification response: {e}")
        return FALLBACK_RESULT

    if not isinstance(data, dict):
        return FALLBACK_RESULT

    classification = data.get("classification")
    if classification not in ALLOWED_CLASSIFICATIONS:
        classification = Classification.TASK.value

    confidence = data.get("confidence")
    if confidence not in ALLOWED_CONFIDENCES:
        confidence = Confidence.MEDIUM.value

    return ClassificationResult(classification=classification, confidence=confidence)


class EmailClassifier:
    """Classify emails as task, meeting, approval or notice."""

    def __init__(self, llm: LLMClient):
        self._llm = llm

    def classify(self, subject: str, body: str, sender: str) -> ClassificationResult:
        """Classify one email; LLM failures yield (``task``, ``low``)."""
        messages = [
            {"role": "system", "content": CLASSIFICATION_SYSTEM_PROMPT},
            {"role": "user", "content": build_classification_prompt(subject, body or "", sender)},
        ]
        try:
            response = self._llm.chat(messages)
        except LLMUnavailableError as e:
            logger.error(f"Classification error: {e.details.get('reason')}")
            return FALLBACK_RESULT

        return parse_classification(response)
