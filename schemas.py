from pydantic import BaseModel

from db.models import Image as ImageModel


class NewImageRequest(BaseModel):
    image_url: str | None = None
    image_base64: str | None = None
    object_detection: bool = False
    label: str | None = None


class ImageResult(BaseModel):
    id: int
    url: str
    tags: list[str] = list()
    label: str

    @classmethod
    def from_model(cls, image: ImageModel) -> "ImageResult":
        return cls(id=image.id, url=image.url, tags=image.tag_names, label=image.label)
