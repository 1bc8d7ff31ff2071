"""Public package surface of the greeting service.

``create_app`` builds the Flask application around an injected logging
runtime, ``init`` composes that runtime, and ``provision`` applies the
``messages`` provisioning script.
"""

from __future__ import annotations

from .__init__conf__ import version as __version__
from .config import ConfigurationError, Settings, load_settings
from .provision import provision
from .runtime import LoggerProxy, LoggingRuntime, init
from .web import GREETING, create_app

__all__ = [
    "ConfigurationError",
    "GREETING",
    "LoggerProxy",
    "LoggingRuntime",
    "Settings",
    "__version__",
    "create_app",
    "init",
    "load_settings",
    "provision",
]
