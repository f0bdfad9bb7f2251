"""HTTP interface: accept a sort script and folders, answer with the transcript."""

import asyncio
import logging
from functools import partial
from typing import Any, Dict

from aiohttp import web

from . import __version__
from .core.sorter import LibrarySorter
from .exceptions import SortAbortedError
from .models.config import FILE_OPERATION_MODES, SortConfig

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("sourceFolder", "destinationFolder", "script")


def _logs_response(logs, status: int = 200) -> web.Response:
    return web.json_response({"logs": list(logs)}, status=status)


def _run_sort(request_data: Dict[str, Any]):
    config = SortConfig(
        source_directory=request_data["sourceFolder"],
        destination_directory=request_data["destinationFolder"],
        mode=request_data["fileOperationMode"],
    )
    return LibrarySorter(config).run(request_data["script"])


async def index(request: web.Request) -> web.Response:
    """Describe the service."""
    return web.json_response({
        "name": "music-sorter",
        "version": __version__,
        "endpoints": {
            "POST /sort": {
                "sourceFolder": "folder to read audio files from",
                "destinationFolder": "root of the sorted library",
                "script": "sort script text",
                "fileOperationMode": "preview, move or copy",
            },
        },
    })


async def sort_music_library(request: web.Request) -> web.Response:
    """Run a sort and return its log transcript."""
    try:
        request_data = await request.json()
        if not isinstance(request_data, dict):
            raise ValueError("request body must be a JSON object")
    except ValueError as e:
        logger.warning(f"Error decoding request body: {e}")
        return _logs_response([f"Server Error: Invalid request body - {e}"], status=400)

    mode = request_data.get("fileOperationMode")
    mode = mode.lower() if isinstance(mode, str) else ""
    missing = [
        name for name in REQUIRED_FIELDS
        if not isinstance(request_data.get(name), str) or not request_data[name]
    ]
    if missing or mode not in FILE_OPERATION_MODES:
        message = ("Missing required fields or invalid file operation mode "
                   "(must be 'preview', 'move', or 'copy')")
        logger.warning(f"{message} in request")
        return _logs_response([f"Client Error: {message}"], status=400)
    request_data["fileOperationMode"] = mode

    logger.info(
        f"Received sort request: Source='{request_data['sourceFolder']}', "
        f"Destination='{request_data['destinationFolder']}', Mode='{mode}'"
    )

    loop = asyncio.get_running_loop()
    try:
        report = await loop.run_in_executor(None, partial(_run_sort, request_data))
    except SortAbortedError as e:
        logger.error(f"Error executing sort: {e}")
        logs = list(e.report.logs) if e.report is not None else []
        logs.append(f"Error during sorting process: {e}")
        return _logs_response(logs, status=500)

    logger.info("Sort request processed successfully.")
    return _logs_response(report.logs)


def create_app() -> web.Application:
    """Create the aiohttp application."""
    app = web.Application()
    app.router.add_get("/", index)
    app.router.add_post("/sort", sort_music_library)
    return app


def run_server(host: str = "0.0.0.0", port: int = 8080) -> None:
    """Serve the application until interrupted."""
    logger.info(f"Starting server on {host}:{port}")
    web.run_app(create_app(), host=host, port=port)
