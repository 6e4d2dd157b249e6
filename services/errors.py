class ImageServiceError(Exception):
    """Base class for errors the image services report to callers"""


class InvalidImageRequest(ImageServiceError):
    """The request is malformed or contradicts itself"""


class ImageNotFound(ImageServiceError):
    def __init__(self, image_id: int):
        super().__init__(f"No image found with id {image_id}")
        self.image_id = image_id
