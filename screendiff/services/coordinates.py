from typing import Tuple

from pydantic import ValidationError

from screendiff.exceptions import MalformedJSONError
from screendiff.schemas.comparison import BoundingBox, ImageDimensions

Size = Tuple[float, float]


def rescale_box(box: BoundingBox, processed: ImageDimensions | Size, target: ImageDimensions | Size) -> BoundingBox:
    """
    Map a box from the model's processed-image space onto the target image.

    X and Y scale independently since the two spaces may differ in aspect
    ratio. Nothing is clipped; out-of-canvas values pass through.
    """
    processed_w, processed_h = _as_size(processed)
    target_w, target_h = _as_size(target)
    if not (processed_w > 0 and processed_h > 0):
        raise MalformedJSONError(f"Processed dimensions must be positive, got {processed_w}x{processed_h}")

    scale_x = target_w / processed_w
    scale_y = target_h / processed_h
    try:
        return BoundingBox(
            x1=box.x1 * scale_x,
            y1=box.y1 * scale_y,
            x2=box.x2 * scale_x,
            y2=box.y2 * scale_y,
        )
    except ValidationError as e:
        raise MalformedJSONError(f"Box does not fit the target image: {e}") from e


def _as_size(dims: ImageDimensions | Size) -> Size:
    if isinstance(dims, ImageDimensions):
        return dims.width, dims.height
    return dims[0], dims[1]
