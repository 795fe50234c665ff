"""
Document endpoints: whole-document read, per-collection get/put, reset
"""
from fastapi import APIRouter, Body, HTTPException
from typing import Any
import logging

from evalmate import state
from evalmate.core.document import DocumentFile


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["data"])


def _document() -> DocumentFile:
    if state.DOCUMENT is None:
        raise HTTPException(status_code=500, detail="Document store is not initialized")
    return state.DOCUMENT


@router.get("/data")
async def get_document():
    """Get the whole document, keyed by collection name"""
    return _document().load()


@router.get("/data/{key}")
async def get_collection(key: str):
    """Get one collection"""
    try:
        return _document().get(key)
    except KeyError:
        raise HTTPException(status_code=404, detail="Key not found")


@router.put("/data/{key}")
async def put_collection(key: str, value: Any = Body(...)):
    """
    Replace one collection wholesale

    Request body: any JSON value (list for record collections,
    object for the session)
    """
    _document().put(key, value)
    return {"success": True}


@router.post("/reset")
async def reset_document():
    """Replace the document with the default empty shape"""
    _document().reset()
    logger.info("🔄 Document reset to defaults")
    return {"success": True}
