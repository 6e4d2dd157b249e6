"""Client for the Imagga tagging API (https://docs.imagga.com/#tags)."""
import logging

import requests

from api.core.settings import Settings
from recognition import ImageBase64, ImageSource, ImageUrl, RecognitionClient, RecognitionError

logger = logging.getLogger(__name__)


class ImaggaClient(RecognitionClient):
    """
    Tags images with Imagga.

    Authentication is HTTP basic, the API key being the user name and the API
    secret the password. URLs are sent with a GET request, base64 payloads are
    POSTed as x-www-form-urlencoded data.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str = "https://api.imagga.com/v2",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (api_key, api_secret)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImaggaClient":
        return cls(
            settings.imagga_api_key,
            settings.imagga_api_secret,
            base_url=settings.imagga_api_url,
            timeout=settings.imagga_timeout,
        )

    def close(self):
        self.session.close()

    def get_tags(self, source: ImageSource) -> list[str]:
        endpoint = f"{self.base_url}/tags"
        try:
            if isinstance(source, ImageUrl):
                logger.debug(f"Requesting Imagga tags for {source.url}")
                response = self.session.get(endpoint, params={"image_url": source.url}, timeout=self.timeout)
            elif isinstance(source, ImageBase64):
                logger.debug("Requesting Imagga tags for an uploaded image")
                response = self.session.post(endpoint, data={"image_base64": source.data}, timeout=self.timeout)
            else:
                raise TypeError(f"Unsupported image source: {source!r}")
        except requests.RequestException as e:
            # nothing came back, so Imagga is down or unreachable
            raise RecognitionError(f"Error while making request to Imagga: {e}") from e

        if not response.ok:
            raise RecognitionError(
                f"Received error {response.status_code} from Imagga: {_error_text(response)}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RecognitionError(f"Received {response.status_code} response from Imagga but could not deserialize: {e}") from e

        result = body.get("result") if isinstance(body, dict) else None
        if result is None:
            raise RecognitionError(f"Received {response.status_code} response from Imagga but with missing result")
        try:
            tags = [tag["tag"]["en"] for tag in result["tags"]]
        except (KeyError, TypeError) as e:
            raise RecognitionError(f"Unexpected tag format in Imagga response: {e}") from e

        # confidence values are discarded, only the english names are kept
        return list(dict.fromkeys(tags))


def _error_text(response: requests.Response) -> str:
    try:
        return response.json()["status"]["text"]
    except (ValueError, KeyError, TypeError):
        return response.text or response.reason or "no details"
