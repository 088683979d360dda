"""
Application package initializer.

The project is split into a few small pieces: ``core`` holds
configuration, logging, security helpers and the document store
client; ``services`` holds the account and catalog logic; ``api``
exposes both through FastAPI routers.  ``create_app`` in ``main``
wires them together.
"""

from .main import app, create_app  # noqa: F401
