# metadata.py
"""Flat JSON side-file mapping file ids to upload metadata."""
from datetime import datetime
import json
import logging
import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError

import config

logger = logging.getLogger(__name__)


class FileMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original_name: str = Field(..., alias="originalName")
    filename: str
    size: int
    mimetype: str
    upload_date: datetime = Field(..., alias="uploadDate")

    def to_json(self):
        return self.model_dump(mode="json", by_alias=True)


class MetadataStore:
    """
    In-memory map backed by a JSON list of [file_id, record] pairs.
    Load and save errors are logged; the server keeps running without them.
    """

    def __init__(self, path=config.METADATA_FILE):
        self.path = path
        self.entries = {}

    def __contains__(self, file_id):
        return file_id in self.entries

    def __len__(self):
        return len(self.entries)

    def get(self, file_id):
        return self.entries.get(file_id)

    def set(self, file_id, record: FileMetadata):
        self.entries[file_id] = record

    def load(self):
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                pairs = json.load(f)
            for file_id, value in pairs:
                self.entries[file_id] = FileMetadata.model_validate(value)
            logger.info(f"Loaded {len(self.entries)} file metadata entries")
        except (OSError, TypeError, ValueError, ValidationError):
            logger.exception("Error loading metadata")

    def save(self):
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump([[k, v.to_json()] for k, v in self.entries.items()], f)
        except OSError:
            logger.exception("Error saving metadata")

    def rebuild_from(self, storage):
        """Add a record for every stored file that has none; returns how many were added."""
        added = 0
        for stored in storage.list_files():
            file_id = os.path.splitext(stored.filename)[0]
            if file_id in self.entries:
                continue
            self.entries[file_id] = FileMetadata(
                original_name=stored.filename,
                filename=stored.filename,
                size=stored.size,
                mimetype="audio/mpeg",
                upload_date=stored.modified,
            )
            added += 1
        if added:
            logger.info(f"Rebuilt metadata for {added} files")
            self.save()
        return added
