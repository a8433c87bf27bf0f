"""File upload helper.

Selects a fixture file into a file input without going through the
native file chooser.
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING

from app_e2e.config import get_config
from app_e2e.decorators import command
from app_e2e.models import E2EError, ErrorCode

if TYPE_CHECKING:
    from playwright._impl._api_structures import FilePayload
    from playwright.async_api import Page

logger = logging.getLogger(__name__)


def fixture_path(file_name: str) -> Path:
    """Resolve a file name inside the fixtures folder.

    Raises:
        E2EError: If the fixture does not exist
    """
    path = get_config().fixtures_folder / file_name
    if not path.is_file():
        raise E2EError(
            code=ErrorCode.FIXTURE_NOT_FOUND,
            message=f"Fixture not found: {path}",
            details={"file_name": file_name, "path": str(path)},
        )
    return path


@command
async def upload_file(page: Page, selector: str, file_name: str, file_type: str = "") -> None:
    """Select a fixture file into the file input matching `selector`.

    Args:
        page: Playwright page
        selector: Selector of the <input type="file">
        file_name: File name inside the fixtures folder
        file_type: MIME type; guessed from the file name when empty

    Raises:
        E2EError: If the fixture does not exist
    """
    path = fixture_path(file_name)
    mime_type = file_type or mimetypes.guess_type(file_name)[0] or "application/octet-stream"
    payload: FilePayload = {
        "name": file_name,
        "mimeType": mime_type,
        "buffer": path.read_bytes(),
    }
    await page.locator(selector).set_input_files(payload)
    logger.debug("Selected %s (%s) into %s", file_name, mime_type, selector)
