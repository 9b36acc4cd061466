"""Explain Server: formatted model explanations for short passages.

A small HTTP service that asks a chat-completion model for a three-part
explanation of a passage (context, current state and forecast, one action)
and normalises the free-form reply into a fixed three-block layout for a
browser client.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``;
``api/server.py`` and ``api/routes/health.py`` import ``__version__`` from
here.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# Falls back to a dev marker when imported from a source checkout that was
# never installed.
try:
    __version__: str = version("explain-server")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
