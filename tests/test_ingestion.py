import pytest
from PIL import Image as PILImage

from db.images import list_images
from recognition import ImageBase64, ImageUrl
from schemas import NewImageRequest
from services.errors import ImageNotFound, InvalidImageRequest
from services.ingestion import create_image, generate_label, resolve_image_source
from services.query import find_images, get_image, split_tag_list
from upload_utils import BlobStore, normalize_base64


class BrokenBlobStore(BlobStore):
    def __init__(self):
        self.deleted = []

    def save(self, image, image_id):
        raise OSError("disk full")

    def delete(self, image_id):
        self.deleted.append(image_id)


def test_resolve_image_source():
    assert resolve_image_source(NewImageRequest(image_url="http://x/y.png")) == ImageUrl("http://x/y.png")
    assert resolve_image_source(NewImageRequest(image_base64="aGk=")) == ImageBase64("aGk=")
    with pytest.raises(InvalidImageRequest):
        resolve_image_source(NewImageRequest(image_url="http://x/y.png", image_base64="aGk="))
    with pytest.raises(InvalidImageRequest):
        resolve_image_source(NewImageRequest())


def test_generate_label():
    assert generate_label([]) == "An untagged image"
    assert generate_label(["dog"]) == "An image containing dog."
    assert generate_label(["dog", "cat"]) == "An image containing dog, cat."


def test_empty_label_is_kept(session, recognizer, blob_store):
    image = create_image(NewImageRequest(image_url="http://x/y.png", label=""), session, recognizer, blob_store)
    assert image.label == ""


def test_data_url_prefix_is_accepted(session, recognizer, blob_store, png_base64):
    request = NewImageRequest(image_base64=f"data:image/png;base64,{png_base64}")

    image = create_image(request, session, recognizer, blob_store)

    assert image.url == f"http://testserver/files/{image.id}.png"
    assert blob_store.get_image_path(image.id).is_file()


def test_non_image_payload_is_rejected(session, recognizer, blob_store):
    # valid base64, but of plain text
    with pytest.raises(InvalidImageRequest):
        create_image(NewImageRequest(image_base64="aGVsbG8gd29ybGQ="), session, recognizer, blob_store)
    assert list_images(session) == []


def test_failed_upload_persists_nothing(session, recognizer, png_base64):
    broken = BrokenBlobStore()

    with pytest.raises(OSError):
        create_image(NewImageRequest(image_base64=png_base64), session, recognizer, broken)
    session.rollback()

    assert list_images(session) == []
    assert len(broken.deleted) == 1


def test_split_tag_list():
    assert split_tag_list("dog,cat") == ["dog", "cat"]
    assert split_tag_list(" Dog , cat,,") == ["Dog", "cat"]
    assert split_tag_list("") == []


def test_query_service(session, recognizer, blob_store):
    recognizer.tags = ["dog"]
    image = create_image(
        NewImageRequest(image_url="http://x/dog.png", object_detection=True), session, recognizer, blob_store
    )

    assert get_image(session, image.id).id == image.id
    with pytest.raises(ImageNotFound):
        get_image(session, image.id + 1)
    assert [i.id for i in find_images(session)] == [image.id]
    assert [i.id for i in find_images(session, objects="dog")] == [image.id]
    assert find_images(session, some_objects="cat") == []
    with pytest.raises(InvalidImageRequest):
        find_images(session, objects="dog", some_objects="cat")


def test_normalize_base64():
    assert normalize_base64("data:image/png;base64,aGk=") == "aGk="
    assert normalize_base64(" aG\nk= ") == "aGk="
    assert normalize_base64("aGk=") == "aGk="


def test_oversized_image_is_rejected(monkeypatch, session, recognizer, blob_store, png_base64):
    # 4x4 pixels is over twice this limit, which Pillow treats as a decompression bomb
    monkeypatch.setattr(PILImage, "MAX_IMAGE_PIXELS", 4)

    with pytest.raises(InvalidImageRequest):
        create_image(NewImageRequest(image_base64=png_base64), session, recognizer, blob_store)
    assert list_images(session) == []
