from typing import Annotated

from fastapi import Depends, Request

from api.core.settings import Settings, get_settings
from recognition import RecognitionClient
from upload_utils import BlobStore, FILES_DIR, FILES_ROUTE, LocalBlobStore

SettingsDependency = Annotated[Settings, Depends(get_settings)]


def get_recognition_client(request: Request) -> RecognitionClient:
    # built once in the app lifespan so every request shares its connection pool
    return request.app.state.recognition_client


def get_blob_store(settings: SettingsDependency) -> BlobStore:
    return LocalBlobStore(FILES_DIR, f"{settings.public_base_url}{FILES_ROUTE}")


RecognitionClientDependency = Annotated[RecognitionClient, Depends(get_recognition_client)]
BlobStoreDependency = Annotated[BlobStore, Depends(get_blob_store)]
