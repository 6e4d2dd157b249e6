# every table model must be imported here so SQLModel.metadata knows about it
from .image import Image, ImageTag, Tag

__all__ = ["Image", "ImageTag", "Tag"]
