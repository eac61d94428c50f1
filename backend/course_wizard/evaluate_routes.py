"""Stateless evaluation and course generation endpoints used by the browser wizard."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from fastapi import APIRouter, Depends, Request, status
from starlette.responses import JSONResponse

from .checkpoints import get_checkpoint_by_id
from .course_generator import generate_course
from .evaluation import evaluate_checkpoint
from .llm_client import EvaluationClient
from .models import answers_from_wire

router = APIRouter(prefix="/api", tags=["evaluation"])
logger = logging.getLogger(__name__)

_client: Optional[EvaluationClient] = None


def get_evaluation_client() -> EvaluationClient:
    global _client
    if _client is None:
        _client = EvaluationClient()
    return _client


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _json_body(request: Request) -> Optional[Dict[str, Any]]:
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


@router.post("/evaluate")
async def evaluate_endpoint(
    request: Request,
    client: EvaluationClient = Depends(get_evaluation_client),
) -> JSONResponse:
    body = await _json_body(request)
    if body is None:
        return error_response(status.HTTP_400_BAD_REQUEST, "Request body must be a JSON object.")

    checkpoint_id = body.get("checkpointId")
    section_id = body.get("sectionId")
    answers = body.get("answers")
    if not checkpoint_id or not section_id or answers is None:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Missing required fields: checkpointId, sectionId, answers",
        )

    checkpoint = get_checkpoint_by_id(str(checkpoint_id))
    if checkpoint is None:
        return error_response(status.HTTP_404_NOT_FOUND, f"Checkpoint not found: {checkpoint_id}")

    if not isinstance(answers, Mapping):
        return error_response(status.HTTP_400_BAD_REQUEST, "answers must be an object of question ids to values.")
    try:
        parsed = answers_from_wire(answers)
    except TypeError as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    try:
        result = await evaluate_checkpoint(checkpoint, parsed, client)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Evaluation failed for checkpoint %s (section %s)", checkpoint.id, section_id)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Evaluation failed")

    return JSONResponse(content={"result": result.to_wire()})


@router.post("/generate")
async def generate_endpoint(
    request: Request,
    client: EvaluationClient = Depends(get_evaluation_client),
) -> JSONResponse:
    body = await _json_body(request)
    if body is None:
        return error_response(status.HTTP_400_BAD_REQUEST, "Request body must be a JSON object.")
    answers = body.get("answers")
    if not isinstance(answers, Mapping) or not answers:
        return error_response(status.HTTP_400_BAD_REQUEST, "Missing required field: answers")
    try:
        parsed = answers_from_wire(answers)
    except TypeError as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    try:
        course = await generate_course(parsed, client, chunked=body.get("chunked") is True)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Course generation failed")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Course generation failed")

    return JSONResponse(content={"course": course.to_wire()})


__all__ = ["error_response", "get_evaluation_client", "router"]
