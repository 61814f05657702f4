# app.py  (upload / streaming API)
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

import uvicorn
from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse, StreamingResponse

import config
from metadata import FileMetadata, MetadataStore
from storage import make_storage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("listen-backend")


def content_disposition(name):
    # headers are latin-1 only: send an ASCII fallback plus the RFC 5987 UTF-8 form
    fallback = "".join(c if " " <= c < "\x7f" and c not in '"\\' else "_" for c in name)
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(name, safe='')}"


def create_app(storage=None, metadata=None, listener_url=config.LISTENER_URL,
               max_upload_mb=config.MAX_UPLOAD_MB):
    storage = storage if storage is not None else make_storage()
    if metadata is None:
        metadata = MetadataStore()
        metadata.load()
        metadata.rebuild_from(storage)
    max_upload_bytes = max_upload_mb * 1024 * 1024

    app = FastAPI(title="Eyes-Closed Listening API")
    app.state.storage = storage
    app.state.metadata = metadata

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def lookup(file_id):
        record = metadata.get(file_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Audio file not found")
        return record

    @app.get("/")
    def root():
        return {"status": "ok"}

    @app.post("/upload")
    async def upload(request: Request, audio: Optional[UploadFile] = File(None)):
        if audio is None:
            raise HTTPException(status_code=400, detail="No audio file uploaded")
        content_type = audio.content_type or ""
        if not content_type.startswith("audio/"):
            raise HTTPException(status_code=400, detail="Only audio files are allowed!")

        data = await audio.read(max_upload_bytes + 1)
        if len(data) > max_upload_bytes:
            raise HTTPException(status_code=400,
                                detail=f"File too large. Maximum size is {max_upload_mb}MB.")

        file_id = str(uuid.uuid4())
        original_name = audio.filename or file_id
        filename = f"{file_id}{os.path.splitext(original_name)[1]}"
        uploaded_at = datetime.now(timezone.utc)
        try:
            storage.save(filename, data, content_type=content_type,
                         metadata={"originalName": original_name,
                                   "uploadDate": uploaded_at.isoformat()})
        except Exception as e:
            logger.exception("Error storing upload")
            raise HTTPException(status_code=500, detail=str(e))

        metadata.set(file_id, FileMetadata(
            original_name=original_name,
            filename=filename,
            size=len(data),
            mimetype=content_type,
            upload_date=uploaded_at,
        ))
        metadata.save()
        logger.info(f"Stored upload {original_name} as {filename} ({len(data)} bytes)")

        return {
            "success": True,
            "url": f"{str(request.base_url).rstrip('/')}/listen/{file_id}",
            "fileId": file_id,
        }

    @app.get("/audio/{file_id}")
    def audio(file_id: str):
        record = lookup(file_id)
        if not storage.exists(record.filename):
            logger.error(f"Metadata for {file_id} points at missing file {record.filename}")
            raise HTTPException(status_code=404, detail="Audio file not found")
        return StreamingResponse(
            storage.iter_bytes(record.filename),
            media_type=record.mimetype,
            headers={"Content-Disposition": content_disposition(record.original_name)},
        )

    @app.get("/listen/{file_id}")
    def listen(file_id: str):
        lookup(file_id)
        return RedirectResponse(f"{listener_url.rstrip('/')}/?file_id={file_id}")

    @app.get("/info/{file_id}")
    def info(file_id: str):
        return lookup(file_id).to_json()

    return app


app = create_app()


if __name__ == "__main__":
    logger.info(f"Server running on http://localhost:{config.SERVER_PORT}")
    uvicorn.run(app, host=config.SERVER_HOST, port=config.SERVER_PORT)
