import abc
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageUrl:
    url: str


@dataclass(frozen=True)
class ImageBase64:
    data: str


# an image is either addressed by URL or carried inline, never both
ImageSource = ImageUrl | ImageBase64


class RecognitionError(Exception):
    """Raised when the recognition provider cannot tag an image"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RecognitionClient(abc.ABC):
    @abc.abstractmethod
    def get_tags(self, source: ImageSource) -> list[str]:
        """
        Detect the objects in an image.
        :param source: the image, by URL or base64 encoded
        :return: the detected tag names, without duplicates
        :raises RecognitionError: if the provider call fails for any reason
        """
