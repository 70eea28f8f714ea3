"""
Media host client.

Incoming files are first written to UPLOAD_FOLDER, then pushed to Cloudinary
through its signed upload REST endpoint. The local copy is always removed
afterwards, whether the upload worked or not.
"""
from __future__ import annotations

import hashlib
import logging
import os
import time
import uuid
from typing import Optional

import requests
from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"


class MediaUploader:
    def __init__(self, cloud_name: str, api_key: str, api_secret: str, timeout: float = 30.0):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "MediaUploader":
        return cls(
            cloud_name=config.get("CLOUDINARY_CLOUD_NAME", ""),
            api_key=config.get("CLOUDINARY_API_KEY", ""),
            api_secret=config.get("CLOUDINARY_API_SECRET", ""),
            timeout=config.get("UPLOAD_TIMEOUT", 30.0),
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    @property
    def endpoint(self) -> str:
        return f"{CLOUDINARY_API_BASE}/{self.cloud_name}/auto/upload"

    def _signature(self, params: dict) -> str:
        # Cloudinary: sha1 of the sorted "k=v&k=v" string followed by the api secret
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    def upload(self, local_path: Optional[str]) -> Optional[dict]:
        """
        Upload ``local_path`` and return the host's JSON (with ``url``), or None
        when there is nothing to upload or the host rejects it.
        """
        if not local_path:
            return None
        if not os.path.isfile(local_path):
            logger.warning("Upload skipped, file not found: %s", local_path)
            return None
        try:
            if not self.configured:
                logger.warning("Upload skipped, media host credentials are not configured")
                return None
            params = {"timestamp": int(time.time())}
            data = {**params, "api_key": self.api_key, "signature": self._signature(params)}
            with open(local_path, "rb") as fh:
                resp = requests.post(self.endpoint, data=data, files={"file": fh}, timeout=self.timeout)
            if resp.status_code >= 400:
                logger.warning("Upload of %s rejected: HTTP %s", local_path, resp.status_code)
                return None
            payload = resp.json()
            if not payload.get("url") and payload.get("secure_url"):
                payload["url"] = payload["secure_url"]
            return payload if payload.get("url") else None
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Upload of %s failed: %s", local_path, exc)
            return None
        finally:
            discard_temp_file(local_path)


def discard_temp_file(path: Optional[str]) -> None:
    if not path:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove temp file %s: %s", path, exc)


def save_temp_file(file: Optional[FileStorage]) -> Optional[str]:
    """Write an incoming multipart file under UPLOAD_FOLDER and return its path."""
    if file is None or not file.filename:
        return None
    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    name = secure_filename(file.filename) or "upload"
    path = os.path.join(folder, f"{uuid.uuid4().hex}-{name}")
    file.save(path)
    return path


def get_uploader() -> MediaUploader:
    return current_app.extensions["media_uploader"]
