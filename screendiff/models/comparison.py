from sqlalchemy import Column, String, Boolean, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from screendiff.managers.base import BaseSchema, JSONType


class UIElementSchema(BaseSchema):
    __tablename__ = "ui_elements"

    comparison_id = Column(String, ForeignKey("comparisons.uid", ondelete="CASCADE"), nullable=False, index=True)
    screenshot_type = Column(String(50), nullable=False) # baseline or comparison
    element_type = Column(String(100), nullable=True)
    position = Column(JSONType, nullable=True) # {x, y, width, height}
    attributes = Column(JSONType, nullable=True)
    changed = Column(Boolean, default=False)


class DifferenceSchema(BaseSchema):
    __tablename__ = "differences"

    comparison_id = Column(String, ForeignKey("comparisons.uid", ondelete="CASCADE"), nullable=False, index=True)
    element_id = Column(String, ForeignKey("ui_elements.uid", ondelete="SET NULL"), nullable=True)
    change_type = Column(String(50), nullable=True)
    details = Column(JSONType, nullable=True)


class ComparisonSchema(BaseSchema):
    __tablename__ = "comparisons"
    __table_args__ = (
        Index("idx_comparisons_created_at", "created_at"),
    )

    # BaseSchema provides: uid (str), created_at, updated_at

    name = Column(String(255), nullable=True)

    # Inputs
    baseline_image_path = Column(Text, nullable=True)
    comparison_image_path = Column(Text, nullable=True)

    # Results, attached once the pipeline finishes
    diff_image_path = Column(Text, nullable=True)
    report_data = Column(JSONType, nullable=True)

    elements = relationship(UIElementSchema, cascade="all, delete-orphan", lazy="selectin")
    differences = relationship(DifferenceSchema, cascade="all, delete-orphan", lazy="selectin")
