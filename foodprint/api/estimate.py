"""API endpoints for carbon footprint estimation."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Request, UploadFile

from foodprint.api.schemas import (
    CarbonFootprintResponse,
    ErrorResponse,
    EstimateDishRequest,
    ValidationErrorResponse,
    build_estimate_response,
)
from foodprint.services.estimate_service import create_estimate_service
from foodprint.services.image_service import image_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/estimate", tags=["estimate"])

ERROR_RESPONSES = {
    400: {"model": ValidationErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}

# Initialize estimate service
estimate_service = create_estimate_service()


@router.post("", response_model=CarbonFootprintResponse, responses=ERROR_RESPONSES)
async def estimate_dish(request: Request, payload: EstimateDishRequest):
    """
    Estimate the carbon footprint of a dish from its name.

    Returns: Total kg CO2e, per-ingredient breakdown and analysis metadata
    """
    request_id = request.state.request_id
    logger.info(
        "Processing dish estimation request for: %s (RequestId: %s)",
        payload.dish,
        request_id,
    )

    estimate = await estimate_service.estimate_dish(payload.dish)
    response = build_estimate_response(estimate)

    logger.info(
        "Dish estimation completed for: %s. Carbon: %.2f kg CO2 (RequestId: %s)",
        payload.dish,
        response.estimated_carbon_kg,
        request_id,
    )
    return response


@router.post("/image", response_model=CarbonFootprintResponse, responses=ERROR_RESPONSES)
async def estimate_image(request: Request, image: Optional[UploadFile] = File(None)):
    """
    Estimate the carbon footprint of the dish shown in an uploaded image.

    Accepts JPEG, PNG, GIF or WebP up to the configured size limit.
    """
    request_id = request.state.request_id
    logger.info(
        "Processing image estimation request for: %s (RequestId: %s)",
        image.filename if image else None,
        request_id,
    )

    payload = await image_service.read_upload(image)
    estimate = await estimate_service.estimate_image(payload)
    response = build_estimate_response(estimate)

    logger.info(
        "Image estimation completed for: %s. Carbon: %.2f kg CO2 (RequestId: %s)",
        payload.file_name,
        response.estimated_carbon_kg,
        request_id,
    )
    return response
