"""ASGI entrypoint for the SmartDiet API."""

from smart_diet.api.app import create_app
from smart_diet.containers import build_container

app = create_app(build_container())
