from __future__ import annotations

from pathlib import Path

from starlette.responses import FileResponse, Response

ENTRY_POINT = "index.html"


class AssetServer:
    """Serves the client-side application's entry point from a directory."""

    def __init__(self, directory: str | Path, entry_point: str = ENTRY_POINT):
        self.directory = Path(directory)
        self.entry = self.directory / entry_point

    async def entry_point(self) -> Response:
        if not self.entry.is_file():
            return Response(status_code=404)
        return FileResponse(self.entry, media_type="text/html")
