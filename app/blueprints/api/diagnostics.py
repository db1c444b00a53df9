"""Diagnostics API
=================

Endpoints for submitting and querying machine diagnostics.

Routes:
    POST /api/v1/diagnostics                 : Submit a diagnostic (standard or legacy shape)
    GET  /api/v1/diagnostics                 : List diagnostics, newest first (``?limit=N``)
    GET  /api/v1/diagnostics/<id>            : Fetch one diagnostic
    GET  /api/v1/diagnostics/serial/<serial> : History of one machine
    GET  /api/v1/statistics                  : Aggregate counts
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import get_diagnostic_service, get_json_object, get_limit, success
from app.schemas.diagnostics import DiagnosticCreatedResponse
from app.utils.http import safe_route

logger = logging.getLogger(__name__)

diagnostics_api = Blueprint("diagnostics_api", __name__)


@diagnostics_api.post("/diagnostics")
@safe_route("Failed to save diagnostic")
def create_diagnostic() -> Response:
    """Store a diagnostic submitted in either accepted shape.

    Returns:
        201 with ``{"id", "serial_number", "status", "timestamp", "created_at"}``
    """
    record = get_diagnostic_service().ingest(get_json_object())
    body = DiagnosticCreatedResponse(
        id=record.id,
        serial_number=record.serial_number,
        status=record.status,
        timestamp=record.timestamp,
        created_at=record.created_at,
    )
    return success(body.model_dump(mode="json"), 201, message="Diagnostic saved successfully")


@diagnostics_api.get("/diagnostics")
@safe_route("Failed to list diagnostics")
def list_diagnostics() -> Response:
    """List diagnostics, newest first.

    Query parameters:
        limit (int, optional): max rows; absent or <= 0 returns all

    Returns:
        ``{"count": <int>, "diagnostics": [...]}``
    """
    diagnostics = get_diagnostic_service().list_diagnostics(get_limit())
    return success({"count": len(diagnostics), "diagnostics": [d.to_dict() for d in diagnostics]})


@diagnostics_api.get("/diagnostics/<int:diagnostic_id>")
@safe_route("Failed to get diagnostic")
def get_diagnostic(diagnostic_id: int) -> Response:
    diagnostic = get_diagnostic_service().get_diagnostic(diagnostic_id)
    return success({"diagnostic": diagnostic.to_dict()})


@diagnostics_api.get("/diagnostics/serial/<path:serial_number>")
@safe_route("Failed to list machine diagnostics")
def list_machine_diagnostics(serial_number: str) -> Response:
    diagnostics = get_diagnostic_service().list_for_machine(serial_number)
    return success(
        {
            "serial_number": serial_number,
            "count": len(diagnostics),
            "diagnostics": [d.to_dict() for d in diagnostics],
        }
    )


@diagnostics_api.get("/statistics")
@safe_route("Failed to get statistics")
def get_statistics() -> Response:
    """Aggregate counts across every stored diagnostic.

    Returns:
        ``{"statistics": {"total_diagnostics", "unique_machines", "status_distribution", "last_diagnostic"?}}``
    """
    return success({"statistics": get_diagnostic_service().statistics().to_dict()})
