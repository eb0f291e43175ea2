from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from app.api.dependencies import require_capability
from app.core.errors import ServiceError
from app.core.policy import Capability
from app.models.schemas import OperationResult, StoredFiles, UploadedFile, UploadedFiles
from app.services import uploads

router = APIRouter(prefix="/upload", tags=["uploads"])
static_router = APIRouter(tags=["uploads"])

can_write = Depends(require_capability(Capability.UPLOADS_WRITE))

CACHE_CONTROL = "public, max-age=31536000, immutable"


@router.post("", response_model=UploadedFile, status_code=201, dependencies=[can_write])
def upload_file(file: UploadFile = File(...)):
    return uploads.store_file(file.filename, file.content_type, uploads.read_upload(file.file))


@router.post("/multiple", response_model=UploadedFiles, status_code=201, dependencies=[can_write])
def upload_files(files: list[UploadFile] = File(...)):
    stored = uploads.store_files(
        [(item.filename, item.content_type, uploads.read_upload(item.file)) for item in files]
    )
    return {"files": stored}


@router.get("", response_model=StoredFiles)
def list_files():
    return {"files": uploads.list_files()}


@router.delete("/{filename}", response_model=OperationResult, dependencies=[can_write])
def delete_file(filename: str):
    return uploads.delete_file(filename)


@static_router.get("/uploads/{filename}", include_in_schema=False)
def serve_upload(filename: str):
    try:
        path = uploads.resolve_file(filename)
    except ServiceError:
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": f"File not found: {filename}"},
        )
    return FileResponse(path, headers={"Cache-Control": CACHE_CONTROL})
