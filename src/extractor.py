import json
import logging
import math
from typing import Any, Dict, List, Optional

from activity_schema import ActivityStat, AnalysisResult, normalize_activity_kind
from api_models import Model, create_model
from constants import DEFAULT_MODEL_NAME
from errors import ExtractionFailed, FitSnapError
from image_io import ImageInput, coerce_image
from prompts import EXTRACTION_PROMPT, RESPONSE_SCHEMA

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = tuple(RESPONSE_SCHEMA["required"])


class ExtractionClient:
    """Turns a fitness screenshot into an AnalysisResult with a single Gemini call."""

    def __init__(self, model: Optional[Model] = None, model_name: str = DEFAULT_MODEL_NAME) -> None:
        self.model = model or create_model(model_name)

    def extract(self, image: ImageInput) -> AnalysisResult:
        encoded = coerce_image(image)
        picture = encoded.open()

        try:
            response = self.model.call_model(
                user_prompt=EXTRACTION_PROMPT,
                image=picture,
                response_schema=RESPONSE_SCHEMA,
            )
        except FitSnapError:
            raise
        except Exception as exc:
            logger.exception("Gemini extraction call failed: %s", exc)
            raise ExtractionFailed(f"Extraction service error: {exc}") from exc

        payload = parse_response(response)
        result = build_result(payload)
        logger.info(
            "Extracted %s: %s %s (confidence=%.2f)",
            result.activity_kind.value,
            result.primary_value,
            result.unit,
            result.confidence,
        )
        return result


def parse_response(text: Optional[str]) -> Dict[str, Any]:
    """Parse the model's answer into a JSON object, tolerating Markdown fences around it."""
    if not text or not text.strip():
        raise ExtractionFailed("Extraction service returned an empty response.")
    cleaned = text.strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end < start:
        logger.warning("Gemini response has no JSON object: %r", text)
        raise ExtractionFailed("Extraction service response is not a JSON object.")
    try:
        parsed = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse Gemini response %r: %s", text, exc)
        raise ExtractionFailed(f"Extraction service returned malformed JSON: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise ExtractionFailed("Extraction service response is not a JSON object.")
    return parsed


def build_result(payload: Dict[str, Any]) -> AnalysisResult:
    """Validate a parsed response against the schema and map it to an AnalysisResult."""
    missing = [name for name in REQUIRED_FIELDS if payload.get(name) is None]
    if missing:
        raise ExtractionFailed(f"Response violates schema: missing required field(s) {', '.join(missing)}.")

    activity_type = _require_string(payload, "activityType")
    unit = _require_string(payload, "unit")
    summary = _require_string(payload, "summary")

    primary_value = payload["primaryValue"]
    if not _is_number(primary_value):
        raise ExtractionFailed("Response violates schema: 'primaryValue' must be a number.")

    return AnalysisResult(
        activity_kind=normalize_activity_kind(activity_type),
        primary_value=primary_value,
        unit=unit.strip(),
        summary=summary.strip(),
        additional_stats=_parse_stats(payload.get("additionalStats")),
        confidence=_clamp_confidence(payload.get("confidence")),
    )


def _require_string(payload: Dict[str, Any], name: str) -> str:
    value = payload[name]
    if not isinstance(value, str):
        raise ExtractionFailed(f"Response violates schema: '{name}' must be a string.")
    return value


def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


def _parse_stats(raw: Any) -> List[ActivityStat]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ExtractionFailed("Response violates schema: 'additionalStats' must be an array.")
    stats: List[ActivityStat] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict) or item.get("label") is None or item.get("value") is None:
            raise ExtractionFailed(
                f"Response violates schema: additionalStats[{index}] needs a label and a value."
            )
        label, value = item["label"], item["value"]
        if isinstance(label, (dict, list)) or isinstance(value, (dict, list)):
            raise ExtractionFailed(f"Response violates schema: additionalStats[{index}] must hold plain text.")
        stats.append(ActivityStat(label=str(label).strip(), value=str(value).strip()))
    return stats


def _clamp_confidence(value: Any) -> float:
    if not _is_number(value):
        return 0.0
    return min(max(float(value), 0.0), 1.0)
