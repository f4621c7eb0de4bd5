# fleet_inspection/utils/uploads.py
"""Convert FastAPI multipart uploads into the framework-free PhotoUpload used by services."""

from fastapi import UploadFile

from fleet_inspection.services.photo_store import PhotoUpload


async def read_upload(upload: UploadFile) -> PhotoUpload:
    content = await upload.read()
    return PhotoUpload(content=content, filename=upload.filename or "", content_type=upload.content_type)


async def read_uploads(uploads: list[UploadFile]) -> list[PhotoUpload]:
    # Browsers send one empty part when the file input is left blank
    return [await read_upload(u) for u in uploads if u.filename]
