import json
import logging
import re
from typing import Any, List, Optional

from pydantic import ValidationError

from screendiff.exceptions import MalformedJSONError, MissingKeyError, NoJSONFoundError
from screendiff.schemas.comparison import Difference, ParsedResponse, ProcessedDimensions

logger = logging.getLogger(__name__)

DIMENSIONS_KEY = "processed_dimensions"
DIFFERENCES_KEY = "differences"

# ```json ... ``` or a bare ``` ... ``` fence
_FENCE_RE = re.compile(r"```[\w+-]*[ \t]*\r?\n(.*?)```", re.S)
_OBJECT_START_RE = re.compile(r'\{\s*"')


def _fenced_blocks(text: str) -> List[str]:
    return [m.group(1).strip() for m in _FENCE_RE.finditer(text)]


def _first_block(blocks: List[str], key: str) -> Optional[str]:
    """First fenced block whose content opens with the given top-level key."""
    prefix = re.compile(r'^\{\s*"' + re.escape(key) + r'"')
    return next((block for block in blocks if prefix.match(block)), None)


def _decode(snippet: str, label: str) -> Any:
    try:
        return json.loads(snippet)
    except json.JSONDecodeError as e:
        raise MalformedJSONError(f"Malformed JSON in {label} block: {e}") from e


def _decode_first_object(text: str) -> dict:
    """
    Decode the first brace that opens a JSON object. Braces in prose are skipped;
    a keyed object that fails to decode is reported as malformed.
    """
    decoder = json.JSONDecoder()
    for match in re.finditer(r"\{", text):
        try:
            obj, _ = decoder.raw_decode(text, match.start())
            return obj
        except json.JSONDecodeError as e:
            if _OBJECT_START_RE.match(text, match.start()):
                raise MalformedJSONError(f"Malformed JSON in response body: {e}") from e
    raise NoJSONFoundError()


def _to_dimensions(payload: Any) -> Optional[ProcessedDimensions]:
    if not isinstance(payload, dict) or payload.get(DIMENSIONS_KEY) is None:
        return None
    try:
        return ProcessedDimensions.model_validate(payload[DIMENSIONS_KEY])
    except ValidationError as e:
        raise MalformedJSONError(f"Invalid {DIMENSIONS_KEY}: {e}") from e


def _to_differences(payload: Any) -> List[Difference]:
    if not isinstance(payload, dict) or DIFFERENCES_KEY not in payload:
        raise MissingKeyError(DIFFERENCES_KEY)

    items = payload[DIFFERENCES_KEY]
    if items is None:
        return []
    if not isinstance(items, list):
        raise MalformedJSONError(f"'{DIFFERENCES_KEY}' must be a list, got {type(items).__name__}")

    differences = []
    for index, item in enumerate(items):
        try:
            differences.append(Difference.model_validate(item))
        except ValidationError as e:
            raise MalformedJSONError(f"Invalid difference at index {index}: {e}") from e
    return differences


def parse_model_response(text: str) -> ParsedResponse:
    """
    Extract the processed dimensions and the difference list from a model reply.

    Only the first fenced block per key is used. When no fenced block carries
    either key, the first brace-delimited object in the text is decoded and
    both keys are read from it.

    Raises:
        NoJSONFoundError: nothing resembling JSON in the text
        MalformedJSONError: JSON found but undecodable or wrongly shaped
        MissingKeyError: decoded JSON without a `differences` key
    """
    text = text or ""
    blocks = _fenced_blocks(text)
    dimensions_block = _first_block(blocks, DIMENSIONS_KEY)
    differences_block = _first_block(blocks, DIFFERENCES_KEY)

    if dimensions_block is None and differences_block is None:
        logger.info("No keyed JSON fence in model response, falling back to first JSON object")
        dimensions_payload = differences_payload = _decode_first_object(text)
    else:
        dimensions_payload = _decode(dimensions_block, DIMENSIONS_KEY) if dimensions_block else None
        differences_payload = _decode(differences_block, DIFFERENCES_KEY) if differences_block else None

    processed_dimensions = _to_dimensions(dimensions_payload)
    differences = _to_differences(differences_payload)

    logger.info(f"✅ Parsed {len(differences)} difference(s), dimensions {'present' if processed_dimensions else 'absent'}")
    return ParsedResponse(processed_dimensions=processed_dimensions, differences=differences)


__all__ = ["parse_model_response", "DIMENSIONS_KEY", "DIFFERENCES_KEY"]
