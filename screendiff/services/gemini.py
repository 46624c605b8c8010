from google import genai
from google.genai import types
from screendiff.config import init_settings
from screendiff.exceptions import UpstreamError
from typing import Optional
import asyncio
import logging

logger = logging.getLogger(__name__)

COMPARE_PROMPT = """
Compare these two website screenshots and provide a detailed analysis of all UI differences.
The first image is the BASELINE (image1), the second is the COMPARISON (image2).
Also, return the processed image dimensions before analysis.

First, return this JSON:
```json
{
  "processed_dimensions": {
    "image1": { "width": W1, "height": H1 },
    "image2": { "width": W2, "height": H2 }
  }
}
```

Then, return the difference analysis in this format:

```json
{
  "differences": [
    {
      "type": "text_change",
      "location": "header",
      "description": "Question mark changed to exclamation mark",
      "coordinates": {
        "x1": 123, "y1": 456, "x2": 789, "y2": 501
      },
      "highlight_area": {
        "x1": 113, "y1": 446, "x2": 799, "y2": 511
      },
      "before": "text before",
      "after": "text after"
    }
  ]
}
```

[RULES]
1. Coordinates are pixels of image2 as you processed it; (x1, y1) is top-left, (x2, y2) bottom-right.
2. "highlight_area" is the region to mark, slightly larger than "coordinates".
3. "type" is a short tag such as text_change, layout_change, color_change, element_added, element_removed.
4. If there are no differences, return {"differences": []} in the second block.
"""


class GeminiService:
    def __init__(self, client: Optional[genai.Client] = None):
        self.settings = init_settings()
        self.client = client or genai.Client(api_key=self.settings.GEMINI_API_KEY)
        self.model = self.settings.GEMINI_MODEL
        self.max_output_tokens = self.settings.MODEL_MAX_OUTPUT_TOKENS
        self.timeout = self.settings.MODEL_TIMEOUT_SECONDS

    async def compare_images(
        self,
        baseline_data: bytes,
        comparison_data: bytes,
        baseline_mime: str = "image/png",
        comparison_mime: str = "image/png",
    ) -> str:
        """
        Ask the model for a difference analysis of two screenshots.
        Returns the raw reply text; parsing is left to the caller.
        """
        contents = [
            COMPARE_PROMPT,
            types.Part.from_bytes(data=baseline_data, mime_type=baseline_mime),
            types.Part.from_bytes(data=comparison_data, mime_type=comparison_mime),
        ]
        config = types.GenerateContentConfig(
            temperature=0.0,
            max_output_tokens=self.max_output_tokens,
        )

        logger.info(f"Requesting screenshot comparison from {self.model}...")
        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(model=self.model, contents=contents, config=config),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"Model call timed out after {self.timeout}s") from e
        except Exception as e:
            logger.error(f"Model call failed: {e}")
            raise UpstreamError(f"Model call failed: {e}") from e

        text = getattr(response, "text", None)
        if not text:
            raise UpstreamError("Model returned an empty response")

        logger.info(f"RAW COMPARE RESPONSE: {text}")
        return text


_gemini_service: Optional[GeminiService] = None

def get_gemini_service() -> GeminiService:
    """Lazily build the shared service so importing this module needs no credentials."""
    global _gemini_service
    if _gemini_service is None:
        _gemini_service = GeminiService()
    return _gemini_service
