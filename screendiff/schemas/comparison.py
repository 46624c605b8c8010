from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime

# --- Model reply structure ---

class BoundingBox(BaseModel):
    """Top-left (x1, y1) and bottom-right (x2, y2) corners. Ordering is not enforced."""
    class Config:
        allow_inf_nan = False

    x1: float
    y1: float
    x2: float
    y2: float

    def rounded(self) -> "BoundingBox":
        return BoundingBox(x1=round(self.x1), y1=round(self.y1), x2=round(self.x2), y2=round(self.y2))

    def normalized(self) -> tuple[float, float, float, float]:
        return (
            min(self.x1, self.x2),
            min(self.y1, self.y2),
            max(self.x1, self.x2),
            max(self.y1, self.y2),
        )


class ImageDimensions(BaseModel):
    class Config:
        allow_inf_nan = False

    width: float
    height: float


class ProcessedDimensions(BaseModel):
    image1: ImageDimensions
    image2: ImageDimensions


class Difference(BaseModel):
    class Config:
        extra = "allow"

    type: str = "unknown"
    location: Optional[str] = None
    description: Optional[str] = None
    before: Optional[Any] = None
    after: Optional[Any] = None
    coordinates: Optional[BoundingBox] = None
    highlight_area: Optional[BoundingBox] = None

    @property
    def render_box(self) -> Optional[BoundingBox]:
        return self.highlight_area or self.coordinates


class ParsedResponse(BaseModel):
    processed_dimensions: Optional[ProcessedDimensions] = None
    differences: List[Difference] = Field(default_factory=list)


class ComparisonResult(BaseModel):
    class Config:
        frozen = True

    differences: List[Difference] = Field(default_factory=list)
    processed_dimensions: Optional[ProcessedDimensions] = None
    analysis: str
    highlighted_image_path: str
    # rescaled boxes, aligned with `differences` (None where nothing was drawn)
    scaled_boxes: List[Optional[BoundingBox]] = Field(default_factory=list)

# --- API Response ---

class CompareResponse(BaseModel):
    success: bool = True
    comparison_id: str
    differences: List[Difference]
    processed_dimensions: Optional[ProcessedDimensions] = None
    analysis: str
    highlighted_image_path: str


class ComparisonSummary(BaseModel):
    id: str
    name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ComparisonDetailResponse(BaseModel):
    success: bool = True
    comparison: Dict[str, Any]
    elements: List[Dict[str, Any]]
    differences: List[Dict[str, Any]]


class ComparisonListResponse(BaseModel):
    success: bool = True
    comparisons: List[ComparisonSummary]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
