#!/usr/bin/env python3
"""
Instant Film — FastAPI Backend
Accepts photo uploads, runs them through the instant-film pipeline and
serves the results one at a time or as a ZIP archive.
"""

import base64
import logging
import os
import sys
from io import BytesIO
from urllib.parse import quote

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel
from PIL import Image

from core.archive import PackagingError
from core.batch import BatchCoordinator
from core.safety import check_upload, SafetyError, MAX_FILE_MB, ALLOWED_EXTENSIONS
from effects import list_effects as list_film_effects

app = FastAPI(title="Instant Film")

MAX_PREVIEW_DIMENSION = 1024  # Cap preview size to limit data URL bloat

# Structured error recovery hints for user-facing errors
ERROR_RECOVERY = {
    "no_files": {"code": "NO_FILES", "hint": "Select one or more photos first.", "action": "load_file"},
    "empty_batch": {"code": "EMPTY_BATCH", "hint": "Process some photos before downloading.", "action": "load_file"},
    "not_found": {"code": "NOT_FOUND", "hint": "The photo may have been removed. Refresh the gallery.", "action": "refresh"},
    "archive_failed": {"code": "ARCHIVE_FAILED", "hint": "Try again, or download photos one at a time.", "action": "retry"},
    "processing_failed": {"code": "PROCESSING_FAILED", "hint": "Try a different photo.", "action": None},
}


def _error_detail(key: str, message: str) -> dict:
    """Build structured error detail dict for the frontend."""
    recovery = ERROR_RECOVERY.get(key, {})
    return {
        "detail": message,
        "code": recovery.get("code", "UNKNOWN"),
        "hint": recovery.get("hint", ""),
        "action": recovery.get("action"),
    }


# In-memory state for current session
_state = {
    "last_success_count": None,
}


def _on_batch_complete(succeeded: int):
    _state["last_success_count"] = succeeded


_coordinator = BatchCoordinator(on_complete=_on_batch_complete)

# Background batches (wait=false) stay referenced until they settle
_pending = set()


def _on_batch_done(task):
    _pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logging.error("Batch processing failed", exc_info=exc)


class MonochromeToggle(BaseModel):
    enabled: bool


def _attachment_headers(filename: str) -> dict:
    """Content-Disposition that survives non-ASCII filenames."""
    ascii_name = filename.encode("ascii", "replace").decode().replace('"', "_")
    return {
        "Content-Disposition": f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
    }


def _result_to_data_url(result) -> str:
    """PNG result as a data URL for an img tag. Large images are downscaled."""
    data = result.data
    if max(result.width, result.height) > MAX_PREVIEW_DIMENSION:
        img = Image.open(BytesIO(data))
        ratio = MAX_PREVIEW_DIMENSION / max(result.width, result.height)
        img = img.resize(
            (max(1, int(result.width * ratio)), max(1, int(result.height * ratio))),
            Image.LANCZOS,
        )
        buf = BytesIO()
        img.save(buf, format="PNG", optimize=True)
        data = buf.getvalue()
    b64 = base64.b64encode(data).decode()
    return f"data:image/png;base64,{b64}"


def _batch_status(previews: bool = False) -> dict:
    results = _coordinator.results()
    entries = []
    for result in results:
        info = result.info()
        if previews:
            info["preview"] = _result_to_data_url(result)
        entries.append(info)
    return {
        "generation": _coordinator.batch.generation,
        "processing": _coordinator.processing,
        "monochrome": _coordinator.monochrome,
        "count": len(entries),
        "can_download": _coordinator.can_download,
        "last_success_count": _state["last_success_count"],
        "results": entries,
    }


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}


@app.get("/api/effects")
async def list_effects():
    """The instant-film effect stack, in application order."""
    return {"effects": list_film_effects()}


@app.get("/api/file-types")
async def get_file_types():
    return {"extensions": sorted(ALLOWED_EXTENSIONS), "max_file_mb": MAX_FILE_MB}


@app.post("/api/monochrome")
async def set_monochrome(toggle: MonochromeToggle):
    """Flip the monochrome toggle. Files that have not started yet pick it up."""
    _coordinator.monochrome = toggle.enabled
    return {"monochrome": _coordinator.monochrome}


@app.post("/api/batch")
async def submit_batch(
    files: list[UploadFile] | None = File(None),
    monochrome: bool | None = Form(None),
    wait: bool = False,
):
    """Start a new batch from uploaded photos.

    Unsupported or oversized files are skipped and listed; they never abort
    the batch. With wait=true the response is sent once every file settles.
    """
    if monochrome is not None:
        _coordinator.monochrome = monochrome

    accepted = []
    skipped = []
    for upload in files or []:
        data = await upload.read()
        try:
            check_upload(upload.filename, len(data))
        except SafetyError as e:
            skipped.append({"filename": upload.filename, "reason": str(e)})
            continue
        accepted.append((upload.filename, data))

    if not accepted:
        return {"status": "ignored", "submitted": 0, "skipped": skipped}

    handle = _coordinator.submit(accepted)
    response = {
        "status": "processing",
        "generation": handle.generation,
        "submitted": handle.submitted,
        "skipped": skipped,
    }
    if wait:
        try:
            summary = await handle.wait()
        except Exception as e:
            logging.exception("Batch processing failed")
            raise HTTPException(status_code=500, detail=_error_detail("processing_failed", str(e)))
        response.update(
            status="done",
            succeeded=summary.succeeded,
            failed=summary.failed,
            can_download=_coordinator.can_download,
        )
    else:
        _pending.add(handle.task)
        handle.task.add_done_callback(_on_batch_done)
    return response


@app.get("/api/batch")
async def batch_status(previews: bool = False):
    """Current batch: processing state, download availability and results."""
    return _batch_status(previews=previews)


@app.get("/api/batch/{result_id}/download")
async def download_result(result_id: str):
    found = _coordinator.download_one(result_id)
    if found is None:
        raise HTTPException(status_code=404, detail=_error_detail("not_found", f"No result {result_id}"))
    data, filename = found
    return Response(content=data, media_type="image/png", headers=_attachment_headers(filename))


@app.delete("/api/batch/{result_id}")
async def remove_result(result_id: str):
    """Remove one result. Removing a missing id is not an error."""
    removed = _coordinator.remove_result(result_id)
    return {"removed": removed, "count": len(_coordinator.batch), "can_download": _coordinator.can_download}


@app.get("/api/archive")
async def download_archive():
    """All current results as instant-film-photos.zip."""
    if not _coordinator.can_download:
        raise HTTPException(status_code=400, detail=_error_detail("empty_batch", "Nothing to download"))
    try:
        packed = _coordinator.download_archive()
    except PackagingError as e:
        logging.exception("Archive creation failed")
        raise HTTPException(status_code=500, detail=_error_detail("archive_failed", str(e)))
    if packed is None:
        raise HTTPException(status_code=400, detail=_error_detail("empty_batch", "Nothing to download"))
    data, filename = packed
    return Response(content=data, media_type="application/zip", headers=_attachment_headers(filename))


def start():
    import uvicorn
    print("Instant Film — launching at http://127.0.0.1:7860")
    uvicorn.run(app, host="127.0.0.1", port=7860, log_level="warning")


if __name__ == "__main__":
    start()
