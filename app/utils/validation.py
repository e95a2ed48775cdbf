"""
Input validation utilities.

This module reads multipart uploads into memory and checks required
text fields, so that bad requests are rejected before any upload starts.
"""

import logging
from typing import Iterable, List, Optional

from fastapi import UploadFile

from core.exceptions import ValidationError, MSG_FILE_TOO_LARGE, MSG_REQUIRED_FIELDS
from services.media_ingestion import IncomingFile

logger = logging.getLogger(__name__)


async def read_upload_files(
    files: Optional[Iterable[UploadFile]],
    max_size: Optional[int] = None
) -> List[IncomingFile]:
    """
    Read uploaded files into memory.

    When the multipart parser reports a part's size, parts above ``max_size``
    are rejected before their content is buffered.

    Args:
        files: Uploaded files from FastAPI (None when the field is absent)
        max_size: Per-file ceiling in bytes (None disables the early check)

    Returns:
        List[IncomingFile]: File contents with their declared metadata

    Raises:
        ValidationError 400: If a part is too large or cannot be read
    """
    incoming = []
    for file in files or []:
        if max_size is not None and file.size is not None and file.size > max_size:
            logger.warning(f"Rejected {file.filename!r} before reading: {file.size} bytes")
            raise ValidationError(
                MSG_FILE_TOO_LARGE,
                details=f"Maximum size: {max_size / (1024 * 1024):.1f}MB"
            )
        try:
            data = await file.read()
        except Exception as e:
            logger.error(f"Error reading file {file.filename!r}: {str(e)}")
            raise ValidationError(details=f"Error reading file: {str(e)}") from e
        incoming.append(IncomingFile(filename=file.filename, content_type=file.content_type, data=data))
    return incoming


def require_fields(values: dict, *names: str) -> None:
    """
    Ensure that every named field has a value.

    Blank strings count as missing.

    Raises:
        ValidationError 400: If any field is missing
    """
    missing = [
        name for name in names
        if values.get(name) is None or (isinstance(values.get(name), str) and not values[name].strip())
    ]
    if missing:
        raise ValidationError(MSG_REQUIRED_FIELDS, details=f"Missing required field(s): {', '.join(missing)}")
