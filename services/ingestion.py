import logging

from PIL import Image as PILImage
from sqlmodel import Session

from db.images import insert_image
from db.models import Image as ImageModel
from recognition import ImageBase64, ImageSource, ImageUrl, RecognitionClient
from schemas import NewImageRequest
from services.errors import InvalidImageRequest
from upload_utils import BlobStore, InvalidImageData, decode_base64_image, normalize_base64

logger = logging.getLogger(__name__)

# placeholder until the upload is stored, the final url needs the image id
PENDING_UPLOAD_URL = "pending"


def resolve_image_source(request: NewImageRequest) -> ImageSource:
    match (request.image_url, request.image_base64):
        case (str() as url, None):
            return ImageUrl(url)
        case (None, str() as data):
            return ImageBase64(normalize_base64(data))
        case _:
            raise InvalidImageRequest("Expected an image URL or base64 encoded image (not both)")


def generate_label(tags: list[str]) -> str:
    if not tags:
        return "An untagged image"
    return f"An image containing {', '.join(tags)}."


def create_image(
        request: NewImageRequest,
        session: Session,
        recognizer: RecognitionClient,
        blob_store: BlobStore,
) -> ImageModel:
    """
    Create an image record from an upload request.

    The image and its tags are written in a single transaction; an uploaded
    payload is stored under the new image's id before the transaction commits.
    An explicit label always wins over the generated one.

    :raises InvalidImageRequest: if the request does not name exactly one valid image
    :raises RecognitionError: if object detection was requested and the provider failed
    """
    source = resolve_image_source(request)

    upload: PILImage.Image | None = None
    if isinstance(source, ImageBase64):
        try:
            upload = decode_base64_image(source.data)
        except InvalidImageData as e:
            raise InvalidImageRequest(str(e)) from e

    tags = recognizer.get_tags(source) if request.object_detection else []
    label = request.label if request.label is not None else generate_label(tags)

    url = source.url if isinstance(source, ImageUrl) else PENDING_UPLOAD_URL
    image = insert_image(session, url=url, label=label, tags=tags)

    try:
        if upload is not None:
            image.url = blob_store.save(upload, image.id)
            session.add(image)
        session.commit()
    except Exception:
        if upload is not None:
            blob_store.delete(image.id)
        raise

    session.refresh(image)
    logger.info(f"Created image {image.id} with {len(tags)} tag(s)")
    return image
