from __future__ import annotations

import base64
import binascii
import io
import logging
import re
import shutil
from pathlib import Path
from typing import Optional

from PIL import Image
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

_DATA_URI = re.compile(r"^data:(image/\w+);base64,(.+)$", re.DOTALL)
_FORMATS = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG", "webp": "WEBP", "gif": "GIF", "bmp": "BMP"}


class FaceImageStore:
    """Saves enrollment snapshots under ``<root>/students/<student_id>/``."""

    def __init__(self, root: str | Path, *, url_prefix: str = "/uploads"):
        self._root = Path(root)
        self._url_prefix = url_prefix.rstrip("/")

    def _student_dir(self, student_id: str) -> Path:
        return self._root / "students" / secure_filename(student_id)

    def save_data_uri(self, student_id: str, data_uri: str, *, stamp: str) -> Optional[str]:
        """Decode ``data:image/<ext>;base64,...`` and write it to disk.

        Returns the public URL path, or None when the payload is not an
        image data URI.
        """

        m = _DATA_URI.match(data_uri.strip()) if isinstance(data_uri, str) else None
        if not m:
            return None

        ext = m.group(1).split("/")[1].lower()
        try:
            raw = base64.b64decode(m.group(2), validate=False)
            img = Image.open(io.BytesIO(raw))
            img.load()
        except (binascii.Error, ValueError, OSError, Image.DecompressionBombError) as e:
            raise ValueError(f"Face image is not a valid {ext} payload") from e

        folder = self._student_dir(student_id)
        folder.mkdir(parents=True, exist_ok=True)
        filename = secure_filename(f"{student_id}-face-{stamp}.{ext}")
        path = folder / filename

        fmt = _FORMATS.get(ext, img.format or "PNG")
        try:
            if fmt == "JPEG" and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            img.save(path, format=fmt)
        except (KeyError, ValueError, OSError) as e:
            # KeyError: no writer for this format in the installed Pillow
            path.unlink(missing_ok=True)
            raise ValueError(f"Face image could not be saved as {fmt}") from e

        return f"{self._url_prefix}/students/{folder.name}/{filename}"

    def discard(self, url_path: str) -> None:
        """Remove a single file previously returned by ``save_data_uri``."""

        if not url_path.startswith(self._url_prefix + "/"):
            return
        path = self._root / url_path[len(self._url_prefix) + 1:]
        path.unlink(missing_ok=True)

    def delete_student(self, student_id: str) -> None:
        folder = self._student_dir(student_id)
        if folder.exists():
            shutil.rmtree(folder, ignore_errors=True)
            logger.info("Removed face images of student %s", student_id)
