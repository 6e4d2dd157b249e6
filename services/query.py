from sqlmodel import Session

from db.images import TagMatch, get_image_by_id, list_images, list_images_by_tags
from db.models import Image as ImageModel
from services.errors import ImageNotFound, InvalidImageRequest


def split_tag_list(value: str) -> list[str]:
    # tag names are kept as given, case included
    return [name.strip() for name in value.split(",") if name.strip()]


def get_image(session: Session, image_id: int) -> ImageModel:
    image = get_image_by_id(session, image_id)
    if image is None:
        raise ImageNotFound(image_id)
    return image


def find_images(session: Session, objects: str | None = None, some_objects: str | None = None) -> list[ImageModel]:
    """
    `objects` keeps images holding every listed tag,
    `some_objects` keeps images holding at least one of them.
    """
    match (objects, some_objects):
        case (None, None):
            return list_images(session)
        case (str(), None):
            return list_images_by_tags(session, split_tag_list(objects), TagMatch.ALL)
        case (None, str()):
            return list_images_by_tags(session, split_tag_list(some_objects), TagMatch.ANY)
        case _:
            raise InvalidImageRequest("Cannot specify both an objects list and a some_objects list")
