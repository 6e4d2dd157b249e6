import abc
import base64
import binascii
import io
import logging
from pathlib import Path

from PIL import Image as PILImage, UnidentifiedImageError

# local directory uploaded images are written to
FILES_DIR = "./uploaded_files"
# route (from the site root) serving FILES_DIR
FILES_ROUTE = "/files"


class InvalidImageData(ValueError):
    """Raised when a base64 payload does not hold a readable image"""


def normalize_base64(image_base64: str) -> str:
    """
    Strip a data URL prefix such as ``data:image/png;base64,`` and any
    whitespace (line-wrapped payloads), leaving bare base64.
    """
    if image_base64.startswith("data:") and "," in image_base64:
        image_base64 = image_base64.split(",", 1)[1]
    return "".join(image_base64.split())


def decode_base64_image(image_base64: str) -> PILImage.Image:
    """Decode a base64 payload into a Pillow image"""
    try:
        raw = base64.b64decode(normalize_base64(image_base64), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageData(f"image_base64 is not valid base64: {e}") from e
    if not raw:
        raise InvalidImageData("image_base64 is empty")
    try:
        image = PILImage.open(io.BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError) as e:
        raise InvalidImageData(f"image_base64 does not contain a readable image: {e}") from e
    return image


class BlobStore(abc.ABC):
    @abc.abstractmethod
    def save(self, image: PILImage.Image, image_id: int) -> str:
        """Persist the image and return the public URL it is reachable at"""

    @abc.abstractmethod
    def delete(self, image_id: int) -> None:
        """Remove a stored image, ignoring ones that do not exist"""


class LocalBlobStore(BlobStore):
    """Stores uploads as PNG files in a directory served as static files"""

    def __init__(self, files_dir: str | Path, public_url: str):
        self.files_dir = Path(files_dir)
        self.public_url = public_url.rstrip("/")

    def get_image_path(self, image_id: int) -> Path:
        return self.files_dir / f"{image_id}.png"

    def save(self, image: PILImage.Image, image_id: int) -> str:
        self.files_dir.mkdir(parents=True, exist_ok=True)
        path = self.get_image_path(image_id)
        if image.mode not in ("RGB", "RGBA", "L", "LA", "P", "1", "I", "I;16"):
            image = image.convert("RGBA")
        image.save(path, format="PNG")
        logging.debug(f"Saved upload for image {image_id} to {path}")
        return f"{self.public_url}/{path.name}"

    def delete(self, image_id: int) -> None:
        self.get_image_path(image_id).unlink(missing_ok=True)
