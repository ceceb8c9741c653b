"""ASGI entrypoint for the Sōber UI service."""

from sober_ui.api.app import create_app
from sober_ui.containers import build_container

app = create_app(build_container())
