from fastapi import APIRouter, UploadFile, File, Form, Depends
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession
from screendiff.config import init_settings
from screendiff.database import get_db, get_comparison_manager
from screendiff.exceptions import EnumException
from screendiff.managers.comparison import ComparisonManager
from screendiff.schemas.comparison import (
    BoundingBox,
    CompareResponse,
    ComparisonDetailResponse,
    ComparisonListResponse,
    ComparisonResult,
    ComparisonSummary,
    Difference,
)
from screendiff.services.comparator import ComparatorService
from screendiff.services.uploads import UploadService
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def get_comparator() -> ComparatorService:
    return ComparatorService()


def get_upload_service() -> UploadService:
    return UploadService(init_settings().UPLOADS_DIR)


def failure(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _element_for(diff: Difference, box: BoundingBox) -> dict:
    x1, y1, x2, y2 = (int(v) for v in box.rounded().normalized())
    return {
        "element_type": diff.location or diff.type,
        "position": {"x": x1, "y": y1, "width": x2 - x1, "height": y2 - y1},
        "attributes": {"description": diff.description, "before": diff.before, "after": diff.after},
        "changed": True,
    }


async def _store_result(
    manager: ComparisonManager,
    db: AsyncSession,
    comparison_id: str,
    result: ComparisonResult,
):
    report = result.model_dump(mode="json", exclude={"highlighted_image_path"})
    await manager.update_comparison_with_results(comparison_id, result.highlighted_image_path, report, session=db)

    pairs = list(zip(result.differences, result.scaled_boxes))
    element_ids = iter(await manager.store_ui_elements(
        comparison_id,
        "comparison",
        [_element_for(diff, box) for diff, box in pairs if box is not None],
        session=db,
    ))

    rows = []
    for diff, box in pairs:
        rows.append({
            "change_type": diff.type,
            "element_id": next(element_ids) if box is not None else None,
            "details": diff.model_dump(mode="json"),
        })
    await manager.store_differences(comparison_id, rows, session=db)
    await db.commit()


@router.post("/compare", response_model=CompareResponse)
async def compare_screenshots(
    baselineImage: UploadFile = File(...),
    comparisonImage: UploadFile = File(...),
    name: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    manager: ComparisonManager = Depends(get_comparison_manager),
    comparator: ComparatorService = Depends(get_comparator),
    uploads: UploadService = Depends(get_upload_service),
):
    """
    Workflow:
    1. Save both uploads.
    2. Record the comparison.
    3. Run the pipeline (resize, model call, parse, rescale, render).
    4. Attach the highlighted image, report, elements and differences.
    """
    try:
        baseline_path = await uploads.save(baselineImage)
        comparison_path = await uploads.save(comparisonImage)

        comparison_id = await manager.insert_comparison(name, baseline_path, comparison_path, session=db)
        await db.commit()

        result = await comparator.compare(baseline_path, comparison_path)
        await _store_result(manager, db, comparison_id, result)
    except Exception as e:
        logger.error(f"Error processing comparison: {e}", exc_info=True)
        await db.rollback()
        return failure(str(e))

    return CompareResponse(
        comparison_id=comparison_id,
        differences=result.differences,
        processed_dimensions=result.processed_dimensions,
        analysis=result.analysis,
        highlighted_image_path=result.highlighted_image_path,
    )


@router.get("/comparison/{comparison_id}", response_model=ComparisonDetailResponse)
async def get_comparison(
    comparison_id: str,
    manager: ComparisonManager = Depends(get_comparison_manager),
):
    try:
        found = await manager.get_comparison_by_id(comparison_id)
    except EnumException as e:
        if e.status_code == 404:
            return failure("Comparison not found", status_code=404)
        logger.error(f"Error retrieving comparison: {e.detail}")
        return failure(str(e.detail), status_code=e.status_code)
    except Exception as e:
        logger.error(f"Error retrieving comparison: {e}", exc_info=True)
        return failure(str(e))

    return ComparisonDetailResponse(**jsonable_encoder(found))


@router.get("/comparisons", response_model=ComparisonListResponse)
async def list_comparisons(manager: ComparisonManager = Depends(get_comparison_manager)):
    try:
        records = await manager.get_all_comparisons()
    except Exception as e:
        logger.error(f"Error retrieving comparisons: {e}", exc_info=True)
        return failure(str(e))

    return ComparisonListResponse(
        comparisons=[
            ComparisonSummary(id=record.uid, name=record.name, created_at=record.created_at)
            for record in records
        ]
    )
