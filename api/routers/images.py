import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from starlette import status

from api.dependencies import BlobStoreDependency, RecognitionClientDependency
from db import DbSessionDependency
from recognition import RecognitionError
from schemas import ImageResult, NewImageRequest
from services.errors import ImageNotFound, InvalidImageRequest
from services.ingestion import create_image
from services.query import find_images, get_image

logger = logging.getLogger(__name__)

images_router = APIRouter(
    prefix="/images",
    tags=["images"],
    responses={status.HTTP_404_NOT_FOUND: {"message": "Not found"}},
)


@images_router.post("", response_model=ImageResult, status_code=status.HTTP_200_OK)
def post_image(
        request: NewImageRequest,
        db_session: DbSessionDependency,
        recognizer: RecognitionClientDependency,
        blob_store: BlobStoreDependency,
):
    """
    Store an image given by `image_url` or `image_base64` (exactly one).
    Records are returned as `{id, url, tags, label}`: `id` is added to the
    `{url, tags, label}` shape so clients can fetch the record again with
    `GET /images/{id}`.
    """
    try:
        image = create_image(request, db_session, recognizer, blob_store)
        return ImageResult.from_model(image)
    except InvalidImageRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RecognitionError as e:
        logger.error(f"Object detection failed: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Database error while creating image: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Database error: {e}")
    except OSError as e:
        logger.error(f"Could not store uploaded image: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Could not store image: {e}")


@images_router.get("/{image_id}", response_model=ImageResult, status_code=status.HTTP_200_OK)
def get_image_by_id(image_id: int, db_session: DbSessionDependency):
    try:
        return ImageResult.from_model(get_image(db_session, image_id))
    except ImageNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Database error while reading image {image_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Database error: {e}")


@images_router.get("", response_model=list[ImageResult], status_code=status.HTTP_200_OK)
def get_images(
        db_session: DbSessionDependency,
        objects: str | None = None,
        some_objects: str | None = None,
):
    """
    List images, optionally filtered by tag.
    `objects` is a comma separated list of tags that must all be present,
    `some_objects` a list of tags of which at least one must be present.
    """
    try:
        images = find_images(db_session, objects=objects, some_objects=some_objects)
        return [ImageResult.from_model(image) for image in images]
    except InvalidImageRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Database error while listing images: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Database error: {e}")
