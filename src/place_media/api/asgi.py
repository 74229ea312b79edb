"""ASGI entrypoint for the place media API."""

from place_media.api.app import create_app
from place_media.containers import build_container

app = create_app(build_container())
