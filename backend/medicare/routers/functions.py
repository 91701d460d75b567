"""
Account provisioning endpoints. Response bodies keep the shapes the web
client already consumes: {"success", "message", ...} for demo provisioning
and {"error": ...} / {"success", "message", "doctor"} for doctor creation.
"""

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from medicare.auth import principal_from_request
from medicare.database import async_session
from medicare.exceptions import AlreadyProvisioned, Forbidden, MedicareError
from medicare.services.provisioning_service import provisioning_service

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _json(content: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


@router.options("/create-demo-accounts")
@router.options("/create-doctor")
async def preflight():
    return Response(headers=CORS_HEADERS)


@router.post("/create-demo-accounts")
async def create_demo_accounts():
    try:
        accounts = await provisioning_service.create_demo_accounts()
    except AlreadyProvisioned as e:
        return _json({"success": False, "message": e.message}, status_code=400)
    except Exception as e:
        logger.exception("Demo account provisioning failed")
        message = e.message if isinstance(e, MedicareError) else (str(e) or "An unexpected error occurred")
        return _json({"success": False, "message": message}, status_code=500)

    return _json({
        "success": True,
        "message": "Demo accounts created successfully",
        "accounts": accounts,
    })


@router.post("/create-doctor")
async def create_doctor(request: Request):
    """
    Admin-only. The caller's credential and role are verified here, on the
    server, regardless of any client-side gating.
    """
    try:
        async with async_session() as db:
            principal = await principal_from_request(request, db)
        if not principal.is_admin:
            logger.warning("Non-admin %s attempted to create a doctor account", principal.user_id)
            raise Forbidden("Only admins can create doctor accounts")

        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = {}
        if not isinstance(body, dict):
            body = {}

        doctor = await provisioning_service.create_doctor(
            body.get("email"),
            body.get("password"),
            body.get("fullName"),
        )
    except MedicareError as e:
        return _json({"error": e.message}, status_code=e.status_code)
    except Exception as e:
        logger.exception("Doctor account creation failed")
        return _json({"error": str(e) or "An unexpected error occurred"}, status_code=500)

    return _json({
        "success": True,
        "message": "Doctor account created successfully",
        "doctor": doctor,
    })
