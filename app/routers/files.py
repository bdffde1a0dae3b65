# =============================================================================
# app/routers/files.py - File Attachments
# =============================================================================
# Uploads a file to the ERP's File doctype, optionally attaching it to a
# document (doctype + docname). The file is passed through untouched.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile

from app.dependencies import ApiContext
from app.exceptions import ApplicationError, FileTooLargeError
from app.handler import handle_api_request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def upload_file(
    ctx: ApiContext,
    file: Annotated[UploadFile, File(description="File to upload")],
    doctype: Annotated[str | None, Form()] = None,
    docname: Annotated[str | None, Form()] = None,
    is_private: Annotated[bool, Form()] = False,
):
    """
    Upload a file to the ERP.

    Form fields:
        file: The file itself (required)
        doctype, docname: Document to attach the file to (both or neither)
        is_private: Store as a private file (default false)

    Returns:
        {"file": <File document>} with file_url and file_name
    """
    async def produce():
        if bool(doctype) != bool(docname):
            raise ApplicationError("doctype and docname must be given together")

        content = await file.read()
        if len(content) > ctx.settings.max_upload_size_bytes:
            raise FileTooLargeError(len(content) / (1024 * 1024), ctx.settings.MAX_UPLOAD_SIZE_MB)

        filename = file.filename or "upload"
        logger.info(f"Uploading {filename} ({len(content)} bytes)")
        stored = await ctx.erp.file.upload_file(
            content,
            filename,
            doctype=doctype,
            docname=docname,
            is_private=is_private,
            content_type=file.content_type,
        )
        return {"file": stored}

    return await handle_api_request(ctx, produce, require_auth=True)
