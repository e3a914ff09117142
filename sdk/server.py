# sdk/server.py
"""
Server shim that exposes the FastAPI app for uvicorn:
    uvicorn sdk.server:app
``serve_in_background`` runs the same app next to a live recorder node.
"""

from importlib import import_module
import logging
import os
import threading

import uvicorn

log = logging.getLogger(__name__)

UI_API_MODULE = os.environ.get("BAG_RECORDER_UI_MODULE", "apps.ui_api.main")

try:
    mod = import_module(UI_API_MODULE)
    # Expect the FastAPI instance to be named `app` in the module.
    app = getattr(mod, "app")
except (ImportError, AttributeError) as exc:
    raise RuntimeError(
        f"Failed to import FastAPI app from '{UI_API_MODULE}'. "
        "Make sure the module exists and exports `app` (FastAPI instance)."
    ) from exc


def serve_in_background(node, host: str, port: int) -> uvicorn.Server:
    """Bind ``node`` to the API and serve it from a daemon thread."""
    mod.bind(node)
    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_config=None))
    thread = threading.Thread(target=server.run, name="http-api", daemon=True)
    thread.start()
    log.info("control API listening on http://%s:%d", host, port)
    return server
