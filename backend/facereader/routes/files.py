"""
FaceReader Backend — Stored File Route
========================================

What:  Serves stored portraits at the public URLs returned by analyses.
Security: FileService.resolve() rejects paths outside the storage root.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from facereader.routes.dependencies import get_file_service
from facereader.schemas.common import ErrorResponse
from facereader.services.file_service import FileService

router = APIRouter(prefix="/api/files", tags=["Files"])


@router.get(
    "/{file_path:path}",
    response_class=FileResponse,
    responses={
        400: {"description": "Invalid path", "model": ErrorResponse},
        404: {"description": "No such file", "model": ErrorResponse},
    },
    summary="Download a stored image",
)
async def get_file(
    file_path: str,
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    path = files.resolve(file_path)
    return FileResponse(path, headers={"Cache-Control": "public, max-age=3600"})
