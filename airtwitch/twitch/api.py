"""
Streaming platform API client.

Wraps the v5 ("kraken") REST API. Every request carries the application's
Client-ID and the v5 Accept header.
"""

import json
import logging
import os
from importlib import resources
from pathlib import Path
from typing import Any, Optional

from airtwitch.exceptions import ApiError, ConfigurationError, ResolutionError
from airtwitch.utils.http_gateway import HttpGateway

logger = logging.getLogger(__name__)

TWITCH_API_HOST = "api.twitch.tv"
TWITCH_API_V5 = "application/vnd.twitchtv.v5+json"
HEADER_CLIENT_ID = "Client-ID"

ENV_TWITCH_CLIENT_ID = "TWITCH_CLIENT_ID"
CLIENT_ID_RESOURCE = "twitch_client_id"


def resolve_client_id(
    override: Optional[str] = None,
    client_id_file: Optional[str] = None,
) -> str:
    """
    Determine the Client-ID. Sources, in order:

    1. An explicit override value.
    2. The bundled ``twitch_client_id`` resource, or ``client_id_file``
       when given, containing only the ID.
    3. The ``TWITCH_CLIENT_ID`` environment variable.

    Blank values count as absent.

    Raises:
        ConfigurationError: If no source provides an ID, or the ID file
            cannot be read
    """
    if override and override.strip():
        logger.info("Using Client-ID from explicit override")
        return override.strip()

    file_value = _read_client_id_file(client_id_file)
    if file_value:
        return file_value

    env_value = os.environ.get(ENV_TWITCH_CLIENT_ID, "").strip()
    if env_value:
        logger.info(f"Using Client-ID from environment variable {ENV_TWITCH_CLIENT_ID}")
        return env_value

    raise ConfigurationError(
        "Cannot determine Twitch Client-ID: set twitch.client_id, provide a "
        f"{CLIENT_ID_RESOURCE} file or export {ENV_TWITCH_CLIENT_ID}"
    )


def _read_client_id_file(client_id_file: Optional[str]) -> Optional[str]:
    if client_id_file:
        source = Path(client_id_file)
        if not source.is_file():
            logger.info(f"Client-ID file {client_id_file} not present")
            return None
    else:
        source = resources.files("airtwitch").joinpath(CLIENT_ID_RESOURCE)
        if not source.is_file():
            return None

    try:
        lines = source.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            f"Could not load Client-ID file {source}: {e}", original_error=e
        ) from e

    value = lines[0].strip() if lines else ""
    if value:
        logger.info(f"Loaded Client-ID from {source}")
        return value
    return None


class TwitchClient:
    """
    Client for the streaming platform's JSON API.

    Args:
        gateway: Shared HTTP gateway
        client_id: Client-ID override; resolved via ``resolve_client_id``
        client_id_file: Alternative Client-ID file
        api_host: API host name
    """

    def __init__(
        self,
        gateway: HttpGateway,
        client_id: Optional[str] = None,
        client_id_file: Optional[str] = None,
        api_host: str = TWITCH_API_HOST,
    ):
        self._gateway = gateway
        self.client_id = resolve_client_id(client_id, client_id_file)
        self.api_host = api_host

    @property
    def headers(self) -> dict[str, str]:
        """Headers attached to every API request."""
        return {
            HEADER_CLIENT_ID: self.client_id,
            "Accept": TWITCH_API_V5,
        }

    @property
    def gateway(self) -> HttpGateway:
        return self._gateway

    def get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """
        GET an API path and decode the JSON body.

        Raises:
            TransportError: Connection failure
            ApiError: Non-2xx response
            ResolutionError: Body is not valid JSON
        """
        url = f"https://{self.api_host}{path}"
        response = self._gateway.get(url, params=params, headers=self.headers)

        if not response.ok:
            logger.warning(f"Request to {path} failed ({response.status_code}): {response.text[:200]}")
            raise ApiError(
                f"Request to {path} failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return json.loads(response.text)
        except ValueError as e:
            raise ResolutionError(f"Unparseable response from {path}: {e}", original_error=e) from e
