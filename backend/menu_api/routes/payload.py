"""
Menu API Backend: Request Body Reader
======================================

What:  Turns a write request's body into a plain field mapping.
How:   multipart/form-data and urlencoded bodies go through Starlette's form
       parser; file parts become UploadedImage. Anything else is read as a
       JSON object. The services validate the mapping, so no typing happens
       here.
"""

import json
import logging
from typing import Any, Dict

from fastapi import Request
from starlette.datastructures import UploadFile

from menu_api.exceptions import ValidationError
from menu_api.services.file_service import UploadedImage

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_payload(request: Request) -> Dict[str, Any]:
    """
    Read the request body as {field: value}.

    An empty file part (no filename, no bytes) counts as "no file sent", which
    is what browsers submit for an untouched <input type="file">.

    Raises:
        ValidationError: body is not valid JSON or not a JSON object
    """
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        data: Dict[str, Any] = {}
        try:
            for key, value in form.items():
                if isinstance(value, UploadFile):
                    content = await value.read()
                    if not value.filename and not content:
                        data[key] = None
                        continue
                    data[key] = UploadedImage(
                        filename=value.filename or "",
                        content=content,
                        content_type=value.content_type,
                    )
                else:
                    data[key] = value
        finally:
            await form.close()
        return data

    body = await request.body()
    if not body.strip():
        return {}
    try:
        parsed = json.loads(body)
    except ValueError:
        logger.info("Rejected malformed JSON body on %s", request.url.path)
        raise ValidationError(errors={"body": ["El cuerpo de la solicitud no es JSON válido"]})
    if not isinstance(parsed, dict):
        raise ValidationError(errors={"body": ["El cuerpo de la solicitud debe ser un objeto JSON"]})
    return parsed
