from PIL import Image, ImageColor, ImageDraw, UnidentifiedImageError
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Tuple
import logging
import shutil

from screendiff.exceptions import PreprocessError, RenderError
from screendiff.schemas.comparison import BoundingBox

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreprocessedImage:
    """An image as it will be sent to the model, with its scale back to the source."""
    path: str
    original_size: Tuple[int, int]
    size: Tuple[int, int]
    scale_x: float
    scale_y: float
    mime_type: str

    @property
    def resized(self) -> bool:
        return self.size != self.original_size


@dataclass(frozen=True)
class HighlightStyle:
    stroke_color: str = "#FF0000"
    stroke_width: int = 3
    fill_color: str = "#FF000050"

    def rgba(self) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
        stroke = ImageColor.getcolor(self.stroke_color, "RGBA")
        fill = ImageColor.getcolor(self.fill_color, "RGBA")
        return stroke, fill


# modes the PNG encoder writes as-is
_PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}


def _fit_within(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    longer = max(width, height)
    if longer <= max_dimension:
        return width, height
    if width >= height:
        return max_dimension, round(height * max_dimension / width)
    return round(width * max_dimension / height), max_dimension


class ImageService:
    @staticmethod
    def preprocess(image_path: str, max_dimension: int = 1568) -> PreprocessedImage:
        """
        Downsample so the longer side is at most `max_dimension`, keeping aspect ratio.
        Images already within bounds are returned untouched with unit scale factors.
        """
        try:
            with Image.open(image_path) as image:
                image.load()
                width, height = image.size
                new_width, new_height = _fit_within(width, height, max_dimension)

                if (new_width, new_height) == (width, height):
                    mime_type = Image.MIME.get(image.format, "image/png")
                    return PreprocessedImage(image_path, (width, height), (width, height), 1.0, 1.0, mime_type)

                resized_path = f"{image_path}_resized.png"
                if image.mode not in _PNG_MODES:
                    image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
                image.resize((new_width, new_height), Image.Resampling.LANCZOS).save(resized_path, format="PNG")
        except (OSError, UnidentifiedImageError, ValueError) as e:
            raise PreprocessError(f"Cannot preprocess image {image_path}: {e}") from e

        logger.info(f"✅ Resized {image_path} → {new_width}x{new_height}")
        return PreprocessedImage(
            path=resized_path,
            original_size=(width, height),
            size=(new_width, new_height),
            scale_x=width / new_width,
            scale_y=height / new_height,
            mime_type="image/png",
        )

    @staticmethod
    def image_size(image_path: str) -> Tuple[int, int]:
        try:
            with Image.open(image_path) as image:
                return image.size
        except (OSError, UnidentifiedImageError) as e:
            raise RenderError(f"Cannot decode target image {image_path}: {e}") from e

    @staticmethod
    def _output_path(output_dir: Path, suffix: str) -> Path:
        stamp = datetime.now().strftime("%Y%m%d%H%M%S%f")
        path = output_dir / f"highlighted_{stamp}{suffix}"
        counter = 1
        while path.exists():
            path = output_dir / f"highlighted_{stamp}_{counter}{suffix}"
            counter += 1
        return path

    @classmethod
    def draw_highlights(
        cls,
        image_path: str,
        boxes: Optional[Iterable[BoundingBox]],
        output_dir: str,
        style: HighlightStyle = HighlightStyle(),
    ) -> str:
        """
        Write a copy of `image_path` with every box outlined and tinted, in order.
        With no boxes the copy is byte-identical to the source.
        """
        boxes = list(boxes or [])
        out_dir = Path(output_dir)
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RenderError(f"Cannot create output directory {output_dir}: {e}") from e

        try:
            with Image.open(image_path) as image:
                image.load()
                source_mode = image.mode
                canvas = image.convert("RGBA")
        except (OSError, UnidentifiedImageError) as e:
            raise RenderError(f"Cannot decode target image {image_path}: {e}") from e

        if not boxes:
            output_path = cls._output_path(out_dir, Path(image_path).suffix or ".png")
            try:
                shutil.copyfile(image_path, output_path)
            except OSError as e:
                raise RenderError(f"Cannot write highlighted image {output_path}: {e}") from e
            logger.info(f"✅ No differences to highlight, copied source to {output_path}")
            return str(output_path)

        stroke, fill = style.rgba()
        for box in boxes:
            x1, y1, x2, y2 = box.rounded().normalized()
            # each box gets its own layer so overlapping fills stack in order
            layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
            draw = ImageDraw.Draw(layer)
            draw.rectangle([x1, y1, x2, y2], fill=fill)
            draw.rectangle([x1, y1, x2, y2], outline=stroke, width=style.stroke_width)
            canvas = Image.alpha_composite(canvas, layer)

        if source_mode in ("RGB", "L"):
            canvas = canvas.convert("RGB")

        output_path = cls._output_path(out_dir, ".png")
        try:
            canvas.save(output_path, format="PNG")
        except OSError as e:
            raise RenderError(f"Cannot write highlighted image {output_path}: {e}") from e

        logger.info(f"✅ Highlighted image saved at: {output_path}")
        return str(output_path)

image_service = ImageService()
