"""
Palette Maker v1 API Routes
Implements /v1/palette/extract and supporting routes.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from palette_maker.config import config
from palette_maker.schemas import ErrorResponse, Palette, PaletteExtractResponse
from palette_maker.services.colors import ColorExtractor
from palette_maker.services.colors.extraction import ExtractionResult, decode_image_bytes
from palette_maker.services.colors.swatches import render_swatch_strip
from palette_maker.services.imaging import make_thumbnail, read_upload, validate_file_upload
from palette_maker.utils.ids import generate_request_id
from palette_maker.utils.logging import get_logger
from palette_maker.utils.metrics import get_metrics

router = APIRouter(prefix="/v1", tags=["Palette Extraction"])
log = get_logger()


def _run_extraction(data: bytes, seed: Optional[int], include_thumbnail: bool):
    """Decode and extract off the event loop."""
    image = decode_image_bytes(data)
    extractor = ColorExtractor(
        seed=seed,
        cluster_count=config.CLUSTER_COUNT,
        max_dimension=config.MAX_DIMENSION,
        max_iterations=config.MAX_ITERATIONS
    )
    result = extractor.extract(image)
    thumbnail = make_thumbnail(image) if include_thumbnail and image is not None else None
    return result, thumbnail


def _debug_info(result: ExtractionResult, seed: Optional[int]) -> Dict[str, Any]:
    return {
        "iterations": result.iterations,
        "ms_extract": round(result.duration_ms, 2),
        "cluster_count": config.CLUSTER_COUNT,
        "max_dimension": config.MAX_DIMENSION,
        "seed": seed,
        "centroids": result.centroids
    }


@router.post("/palette/extract",
             response_model=PaletteExtractResponse,
             summary="Extract Palette",
             description="Extract the six most prominent vivid colors of an uploaded photo",
             responses={
                 400: {"model": ErrorResponse, "description": "Empty or oversized upload"},
                 415: {"model": ErrorResponse, "description": "Unsupported image type"},
                 500: {"model": ErrorResponse, "description": "Unexpected server error"}
             })
async def extract_palette_endpoint(
    file: UploadFile = File(..., description="Image file (JPEG, PNG, WebP)"),
    include_swatch: bool = Query(True, description="Include a PNG swatch strip"),
    include_thumbnail: bool = Query(False, description="Include a JPEG thumbnail in the palette"),
    seed: Optional[int] = Query(None, ge=0, description="Random seed for reproducible output")
) -> PaletteExtractResponse:
    request_id = generate_request_id()
    metrics = get_metrics()
    metrics.increment_request_count()

    log.info("Starting palette extraction", extra={"request_id": request_id})

    try:
        validate_file_upload(file)
        data = await read_upload(file)
    except HTTPException:
        metrics.increment_failure_count("invalid_upload")
        raise

    if seed is None:
        seed = config.RANDOM_SEED

    with metrics.timed("extraction"):
        result, thumbnail = await run_in_threadpool(_run_extraction, data, seed, include_thumbnail)

    metrics.record_pixel_count(result.valid_pixel_count)
    if result.fallback_used:
        metrics.increment_fallback_count()
        log.warning("Returned default palette", extra={"request_id": request_id})

    swatch_b64 = None
    if include_swatch:
        swatch_b64 = render_swatch_strip(result.colors)

    log.info(f"Palette extraction complete: {result.colors}", extra={"request_id": request_id})

    return PaletteExtractResponse(
        request_id=request_id,
        palette=Palette(colors=result.colors, thumbnail_data=thumbnail),
        fallback_used=result.fallback_used,
        valid_pixel_count=result.valid_pixel_count,
        swatch_png_b64=swatch_b64,
        debug=_debug_info(result, seed)
    )


@router.get("/metrics", summary="Service Metrics")
async def metrics_summary() -> Dict[str, Any]:
    """In-process counters and timing statistics."""
    return get_metrics().get_summary()
