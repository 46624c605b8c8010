import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from screendiff.managers.base import GenericManager
from screendiff.models.comparison import ComparisonSchema, UIElementSchema, DifferenceSchema

logger = logging.getLogger(__name__)


class UIElementManager(GenericManager[UIElementSchema]): pass


class DifferenceManager(GenericManager[DifferenceSchema]): pass


class ComparisonManager(GenericManager[ComparisonSchema]):
    def __init__(self, engine: AsyncEngine):
        super().__init__(engine)
        self.elements = UIElementManager(engine)
        self.differences = DifferenceManager(engine)

    async def insert_comparison(
            self,
            name: Optional[str],
            baseline_image_path: str,
            comparison_image_path: str,
            *,
            session: AsyncSession = None,
    ) -> str:
        record = await self.create(
            ComparisonSchema(
                name=name,
                baseline_image_path=baseline_image_path,
                comparison_image_path=comparison_image_path,
            ),
            session=session,
        )
        return record.uid

    async def update_comparison_with_results(
            self,
            comparison_id: str,
            diff_image_path: str,
            report_data: dict[str, Any],
            *,
            session: AsyncSession = None,
    ) -> ComparisonSchema:
        return await self.update(
            comparison_id,
            {"diff_image_path": diff_image_path, "report_data": report_data},
            session=session,
        )

    async def store_ui_elements(
            self,
            comparison_id: str,
            screenshot_type: str,
            elements: list[dict[str, Any]],
            *,
            session: AsyncSession = None,
    ) -> list[str]:
        """
        Insert the UI elements seen on one screenshot of a comparison.

        Each element dict may carry `element_type`, `position`, `attributes`
        and `changed`. Returns the generated ids in input order.
        """
        records = [
            UIElementSchema(
                comparison_id=comparison_id,
                screenshot_type=screenshot_type,
                element_type=element.get("element_type"),
                position=element.get("position"),
                attributes=element.get("attributes"),
                changed=bool(element.get("changed", False)),
            )
            for element in elements
        ]
        records = await self.elements.create_all(records, session=session)
        return [record.uid for record in records]

    async def store_differences(
            self,
            comparison_id: str,
            differences: list[dict[str, Any]],
            *,
            session: AsyncSession = None,
    ) -> list[str]:
        """Each dict carries `change_type`, `details` and optionally `element_id`."""
        records = [
            DifferenceSchema(
                comparison_id=comparison_id,
                element_id=difference.get("element_id"),
                change_type=difference.get("change_type"),
                details=difference.get("details"),
            )
            for difference in differences
        ]
        records = await self.differences.create_all(records, session=session)
        return [record.uid for record in records]

    async def get_comparison_by_id(self, comparison_id: str, *, session: AsyncSession = None) -> dict[str, Any]:
        record = await self.fetch(comparison_id, session=session)
        comparison = record.model_dump("elements", "differences")
        return {
            "comparison": comparison,
            "elements": [element.model_dump() for element in record.elements],
            "differences": [difference.model_dump() for difference in record.differences],
        }

    async def get_all_comparisons(self, *, session: AsyncSession = None) -> list[ComparisonSchema]:
        return await self.fetch_all(sorts=["-created_at"], include=["uid", "name", "created_at"], session=session)


__all__ = ["ComparisonManager", "UIElementManager", "DifferenceManager"]
