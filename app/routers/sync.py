import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.database import get_sessionmaker
from app.services.session_token import session_from_request
from app.services.sync_store import SyncStore

router = APIRouter()
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,DELETE,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

NOT_AUTHENTICATED = "Not authenticated"


def json_response(body: Dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=CORS_HEADERS)


def storage_error(operation: str, store: SyncStore) -> JSONResponse:
    logger.exception(f"Sync {operation} failed for user {store.user_id}")
    return json_response({"error": "Internal server error"}, status_code=500)


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Request body as a dict; anything unparseable counts as empty"""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def store_for(request: Request, settings: Settings, sessionmaker) -> Optional[SyncStore]:
    session = session_from_request(request, settings)
    if session is None:
        return None
    return SyncStore(sessionmaker, session.userId)


@router.options("")
async def sync_options():
    return Response(status_code=204, headers=CORS_HEADERS)


@router.get("")
async def sync_read(
    request: Request,
    keys: str = "",
    status: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    sessionmaker=Depends(get_sessionmaker),
):
    if sessionmaker is None:
        return json_response({"d1Available": False, "data": {}})

    store = store_for(request, settings, sessionmaker)
    if store is None:
        return json_response({"d1Available": False, "data": {}, "error": NOT_AUTHENTICATED})

    if status:
        return json_response({"d1Available": True})

    wanted = [key.strip() for key in keys.split(",") if key.strip()]
    try:
        data = await store.read(wanted or None)
    except Exception:
        return storage_error("read", store)
    return json_response({"d1Available": True, "data": data})


@router.post("")
async def sync_write(
    request: Request,
    settings: Settings = Depends(get_settings),
    sessionmaker=Depends(get_sessionmaker),
):
    if sessionmaker is None:
        return json_response({"d1Available": False, "data": {}})

    store = store_for(request, settings, sessionmaker)
    if store is None:
        return json_response({"d1Available": False, "data": {}, "error": NOT_AUTHENTICATED})

    body = await read_json_body(request)
    payload = body.get("data")
    if not isinstance(payload, dict):
        return json_response({"error": "Invalid payload"}, status_code=400)

    try:
        updated = await store.write(payload)
    except Exception:
        return storage_error("write", store)
    return json_response({"d1Available": True, "updated": updated})


@router.delete("")
async def sync_delete(
    request: Request,
    settings: Settings = Depends(get_settings),
    sessionmaker=Depends(get_sessionmaker),
):
    if sessionmaker is None:
        return json_response({"d1Available": False})

    store = store_for(request, settings, sessionmaker)
    if store is None:
        return json_response({"d1Available": False, "error": NOT_AUTHENTICATED})

    body = await read_json_body(request)
    keys = body.get("keys")
    try:
        deleted = await store.delete(keys if isinstance(keys, list) else [])
    except Exception:
        return storage_error("delete", store)
    return json_response({"d1Available": True, "deleted": deleted})


@router.api_route("", methods=["PUT", "PATCH"], include_in_schema=False)
async def sync_method_not_allowed():
    return json_response({"error": "Method not allowed"}, status_code=405)
