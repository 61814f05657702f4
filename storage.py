# storage.py
"""Where uploaded audio lives: a local directory or an S3 bucket."""
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import os

import boto3
from botocore.exceptions import ClientError

import config

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class StoredFile:
    filename: str
    size: int
    modified: datetime


class LocalStorage:
    def __init__(self, root=config.UPLOADS_DIR):
        self.root = root

    def _path(self, filename):
        return os.path.join(self.root, os.path.basename(filename))

    def save(self, filename, data: bytes, content_type=None, metadata=None):
        os.makedirs(self.root, exist_ok=True)
        with open(self._path(filename), "wb") as f:
            f.write(data)

    def exists(self, filename):
        return os.path.isfile(self._path(filename))

    def iter_bytes(self, filename):
        with open(self._path(filename), "rb") as f:
            while True:
                chunk = f.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

    def list_files(self):
        if not os.path.isdir(self.root):
            return []
        files = []
        for name in sorted(os.listdir(self.root)):
            path = os.path.join(self.root, name)
            if not os.path.isfile(path):
                continue
            st = os.stat(path)
            files.append(StoredFile(name, st.st_size,
                                    datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)))
        return files


class S3Storage:
    def __init__(self, bucket=config.S3_BUCKET_NAME, client=None,
                 prefix=config.S3_KEY_PREFIX, region=config.AWS_REGION):
        self.bucket = bucket
        self.prefix = prefix
        self.client = client or boto3.client("s3", region_name=region)

    def _key(self, filename):
        return f"{self.prefix}{os.path.basename(filename)}"

    def save(self, filename, data: bytes, content_type=None, metadata=None):
        params = {"Bucket": self.bucket, "Key": self._key(filename), "Body": data}
        if content_type:
            params["ContentType"] = content_type
        if metadata:
            params["Metadata"] = metadata
        self.client.put_object(**params)

    def exists(self, filename):
        try:
            self.client.head_object(Bucket=self.bucket, Key=self._key(filename))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise
        return True

    def iter_bytes(self, filename):
        obj = self.client.get_object(Bucket=self.bucket, Key=self._key(filename))
        yield from obj["Body"].iter_chunks(CHUNK_SIZE)

    def list_files(self):
        files = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=self.prefix):
            for item in page.get("Contents", []):
                name = item["Key"][len(self.prefix):]
                if name:
                    files.append(StoredFile(name, item["Size"], item["LastModified"]))
        return files


def make_storage(backend=config.STORAGE_BACKEND):
    if backend == "s3":
        logger.info(f"Using S3 storage: bucket={config.S3_BUCKET_NAME} region={config.AWS_REGION}")
        return S3Storage()
    if backend != "local":
        raise ValueError(f"unknown STORAGE_BACKEND: {backend}")
    logger.info(f"Using local storage: {config.UPLOADS_DIR}")
    return LocalStorage()
