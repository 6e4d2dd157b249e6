import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles

from api.core.logger import setup_logging
from api.core.settings import SettingsError, get_settings
from api.routers.images import images_router
from db import sessionmanager
from recognition.imagga import ImaggaClient
from upload_utils import FILES_DIR, FILES_ROUTE


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Function that handles startup and shutdown events.
    To understand more, read https://fastapi.tiangolo.com/advanced/events/
    """
    # raises SettingsError and aborts startup if the environment is incomplete
    settings = get_settings()
    setup_logging(settings)
    sessionmanager.init(settings.database_url)
    logging.info("Database initialized")
    app.state.recognition_client = ImaggaClient.from_settings(settings)
    yield
    app.state.recognition_client.close()
    sessionmanager.close()


app = FastAPI(lifespan=lifespan, title="pytag", docs_url="/api/docs")

# check_dir=False: the directory is created by the first upload
app.mount(FILES_ROUTE, StaticFiles(directory=FILES_DIR, check_dir=False), name="files")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(images_router)


def main():
    try:
        settings = get_settings()
    except SettingsError as e:
        sys.exit(f"ERROR: \n{e}\nPlease set these variables (or add them to a .env file) before running this program.")
    setup_logging(settings)
    logging.info("Starting pytag server")
    uvicorn.run("main:app", host=settings.host, reload=False, port=settings.port)


if __name__ == "__main__":
    main()
