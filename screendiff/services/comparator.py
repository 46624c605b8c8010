import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from screendiff.config import Settings, init_settings
from screendiff.exceptions import MissingKeyError, PreprocessError
from screendiff.schemas.comparison import BoundingBox, ComparisonResult, ImageDimensions, ParsedResponse
from screendiff.services.coordinates import rescale_box
from screendiff.services.gemini import GeminiService, get_gemini_service
from screendiff.services.image import HighlightStyle, image_service
from screendiff.services.parser import DIMENSIONS_KEY, parse_model_response

logger = logging.getLogger(__name__)


def scale_differences(parsed: ParsedResponse, target_size: tuple[int, int]) -> List[Optional[BoundingBox]]:
    """
    Rescale every difference's box from the model's view of the comparison
    image onto `target_size`. Entries without a box map to None.
    """
    if not parsed.differences:
        return []
    if parsed.processed_dimensions is None:
        # guessing dimensions would misplace every box
        raise MissingKeyError(DIMENSIONS_KEY)

    processed = parsed.processed_dimensions.image2
    target = ImageDimensions(width=target_size[0], height=target_size[1])
    scaled: List[Optional[BoundingBox]] = []
    for index, diff in enumerate(parsed.differences, start=1):
        box = diff.render_box
        if box is None:
            logger.warning(f"⚠️ Difference {index} has no coordinates, not highlighting: {diff.description}")
            scaled.append(None)
            continue
        scaled_box = rescale_box(box, processed, target)
        logger.info(f"🔸 Highlighting Difference {index}: {diff.description}")
        logger.info(f"   Original: x1={box.x1}, y1={box.y1}, x2={box.x2}, y2={box.y2}")
        logger.info(f"   Scaled: x1={scaled_box.x1}, y1={scaled_box.y1}, x2={scaled_box.x2}, y2={scaled_box.y2}")
        scaled.append(scaled_box)
    return scaled


class ComparatorService:
    def __init__(self, model_service: Optional[GeminiService] = None, settings: Optional[Settings] = None):
        self._model_service = model_service
        self.settings = settings or init_settings()
        self.style = HighlightStyle(
            stroke_color=self.settings.HIGHLIGHT_STROKE_COLOR,
            stroke_width=self.settings.HIGHLIGHT_STROKE_WIDTH,
            fill_color=self.settings.HIGHLIGHT_FILL_COLOR,
        )

    @property
    def model_service(self) -> GeminiService:
        if self._model_service is None:
            self._model_service = get_gemini_service()
        return self._model_service

    async def compare(self, baseline_path: str, comparison_path: str) -> ComparisonResult:
        """
        Workflow:
        1. Downsample both screenshots for the model.
        2. Ask the model for the differences.
        3. Parse the reply.
        4. Rescale boxes onto the original comparison screenshot.
        5. Render the highlighted copy.
        """
        max_dimension = self.settings.MAX_IMAGE_DIMENSION
        baseline, comparison = await asyncio.gather(
            asyncio.to_thread(image_service.preprocess, baseline_path, max_dimension),
            asyncio.to_thread(image_service.preprocess, comparison_path, max_dimension),
        )

        try:
            baseline_data = Path(baseline.path).read_bytes()
            comparison_data = Path(comparison.path).read_bytes()
        except OSError as e:
            raise PreprocessError(f"Cannot read processed image: {e}") from e

        analysis = await self.model_service.compare_images(
            baseline_data,
            comparison_data,
            baseline_mime=baseline.mime_type,
            comparison_mime=comparison.mime_type,
        )

        parsed = parse_model_response(analysis)
        target_size = await asyncio.to_thread(image_service.image_size, comparison_path)
        scaled_boxes = scale_differences(parsed, target_size)

        highlighted_path = await asyncio.to_thread(
            image_service.draw_highlights,
            comparison_path,
            [box for box in scaled_boxes if box is not None],
            self.settings.OUTPUT_DIR,
            self.style,
        )

        return ComparisonResult(
            differences=parsed.differences,
            processed_dimensions=parsed.processed_dimensions,
            analysis=analysis,
            highlighted_image_path=highlighted_path,
            scaled_boxes=scaled_boxes,
        )


__all__ = ["ComparatorService", "scale_differences"]
