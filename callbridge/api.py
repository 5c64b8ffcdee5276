"""
callbridge/api.py
─────────────────────────────────────────────────────────────────────────────
Call Log Bridge: importable facade + HTTP transport

TWO USAGE MODES:
  1. Importable module (the host runtime calls in-process):
         from callbridge.api import BridgeAPI
         bridge = BridgeAPI.from_config(ensure_config())
         bridge.on_activation(Activation(ACTION_SEND, "text/plain", "hi"))
         result = bridge.dispatch("com.example.calllog/share", "getSharedText")

  2. FastAPI HTTP server (UI process on the same device):
         python -m callbridge.api                   # default: port 8765
         python -m callbridge.api --port 9000
         uvicorn callbridge.api:app --port 8765

ENDPOINTS:
  POST /channels/{channel}/{method} : dispatch one command, body = arguments
  POST /activations                 : host reports a new inbound activation
  POST /lifecycle/foreground        : host reports a foreground transition
  GET  /health                      : status + registered channels

  Status codes: 200 success, 400 error result, 501 not implemented.

The server binds to 127.0.0.1 by default. No authentication
(single-user device assumed). Shared text is never logged.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from callbridge.channels import DEFAULT_CHANNEL_PREFIX, build_channels
from callbridge.config import DEFAULT_CONFIG, validate_config
from callbridge.dispatcher import Dispatcher
from callbridge.models.record import Activation, CallRecord
from callbridge.models.result import MethodResult
from callbridge.platform.base import PackageManager
from callbridge.platform.shell import ShellPackageManager, adb_prefix
from callbridge.services.call_history import CallHistoryService
from callbridge.services.launcher import LaunchService
from callbridge.services.share_cell import ShareCapture
from callbridge.stores.base import CallLogStore
from callbridge.stores.sqlite_store import SqliteCallLogStore
from callbridge.stores.xml_store import XmlBackupCallLogStore

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ═══════════════════════════════════════════════════════════════════════════
# IMPORTABLE CLASS
# ═══════════════════════════════════════════════════════════════════════════

class BridgeAPI:
    """
    Owns the three services and the dispatcher wired over them.

    Usage:
        bridge = BridgeAPI(store=SqliteCallLogStore(Path("calls.db")),
                           package_manager=ShellPackageManager())
        calls  = bridge.get_calls_since(1704067200000)
        ok     = bridge.launch_app("com.android.chrome")
    """

    def __init__(
        self,
        store:           CallLogStore,
        package_manager: PackageManager,
        share:           Optional[ShareCapture] = None,
        channel_prefix:  str = DEFAULT_CHANNEL_PREFIX,
    ):
        self.history    = CallHistoryService(store)
        self.share      = share if share is not None else ShareCapture()
        self.launcher   = LaunchService(package_manager)
        self.prefix     = channel_prefix
        self.dispatcher = Dispatcher(
            build_channels(self.history, self.share, self.launcher, prefix=channel_prefix)
        )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "BridgeAPI":
        config = validate_config({**DEFAULT_CONFIG, **config})

        store: CallLogStore
        if config["call_store"] == "xml":
            store = XmlBackupCallLogStore(Path(config["xml_dir"]))
        else:
            store = SqliteCallLogStore(Path(config["db_path"]))

        prefix: List[str] = []
        if config.get("adb_serial") or config.get("use_adb"):
            prefix = adb_prefix(config.get("adb_serial"))
        pm = ShellPackageManager(prefix=prefix, timeout=config["launcher_timeout_sec"])

        logger.info(f"Bridge configured | store={store.name} | adb={bool(prefix)}")
        return cls(store=store, package_manager=pm, channel_prefix=config["channel_prefix"])

    # ── DISPATCH ──────────────────────────────────────────────────────────

    def dispatch(
        self,
        channel_name: str,
        method:       str,
        arguments:    Any = None,
    ) -> MethodResult:
        return self.dispatcher.dispatch(channel_name, method, arguments)

    def channel(self, suffix: str) -> str:
        return f"{self.prefix}/{suffix}"

    # ── DIRECT SERVICE ACCESS ─────────────────────────────────────────────

    def get_calls_since(self, timestamp_ms: int) -> List[CallRecord]:
        return self.history.get_calls_since(timestamp_ms)

    def take_shared_text(self) -> Optional[str]:
        return self.share.take_shared_text()

    def launch_app(self, application_id: str) -> bool:
        return self.launcher.launch_app(application_id)

    # ── HOST LIFECYCLE ────────────────────────────────────────────────────

    def on_activation(self, activation: Activation) -> None:
        self.share.on_new_activation(activation)

    def on_foreground(self) -> None:
        self.share.on_foreground()


# ═══════════════════════════════════════════════════════════════════════════
# FASTAPI HTTP APP
# ═══════════════════════════════════════════════════════════════════════════

_STATUS_CODES = {
    "success": 200,
    "error": 400,
    "not_implemented": 501,
}


class ActivationRequest(BaseModel):
    action:    str
    mime_type: Optional[str] = None
    text:      Optional[str] = None


def _build_app(bridge: Optional[BridgeAPI] = None) -> FastAPI:
    """Build the FastAPI application around one BridgeAPI instance."""
    _bridge = bridge if bridge is not None else BridgeAPI.from_config(dict(DEFAULT_CONFIG))

    _app = FastAPI(
        title       = "Call Log Bridge",
        description = "Call log, shared text and app launch channels for a local UI process",
        version     = VERSION,
        docs_url    = "/docs",
        redoc_url   = None,
    )
    _app.state.bridge = _bridge

    @_app.post("/channels/{channel:path}/{method}", summary="Dispatch one command")
    def dispatch(
        channel:   str,
        method:    str,
        arguments: Optional[Dict[str, Any]] = Body(default=None),
    ):
        result = _bridge.dispatch(channel, method, arguments)
        return JSONResponse(content=result.to_dict(), status_code=_STATUS_CODES[result.status])

    @_app.post("/activations", summary="Report an inbound activation")
    def activation(req: ActivationRequest):
        _bridge.on_activation(Activation(action=req.action, mime_type=req.mime_type, text=req.text))
        return {"status": "ok"}

    @_app.post("/lifecycle/foreground", summary="Report a foreground transition")
    def foreground():
        _bridge.on_foreground()
        return {"status": "ok"}

    @_app.get("/health", summary="Health check")
    def health():
        return {
            "status":   "ok",
            "channels": _bridge.dispatcher.channel_names,
            "version":  VERSION,
        }

    return _app


# Module-level app instance: used by uvicorn callbridge.api:app
app = _build_app()


def serve(bridge: BridgeAPI, host: str = "127.0.0.1", port: int = 8765) -> None:
    import uvicorn

    uvicorn.run(_build_app(bridge), host=host, port=port, log_level="info")


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT: python -m callbridge.api
# ═══════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import argparse

    from callbridge.config import ensure_config

    parser = argparse.ArgumentParser(
        prog        = "callbridge.api",
        description = "Call Log Bridge HTTP server",
    )
    parser.add_argument("--port", type=int, default=None,
                        help="Port to bind (default: from config, 8765)")
    parser.add_argument("--host", type=str, default=None,
                        help="Host to bind: DO NOT change to 0.0.0.0 on shared networks")
    args = parser.parse_args()

    logging.basicConfig(
        level   = logging.INFO,
        format  = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt = "%H:%M:%S",
    )
    cfg = ensure_config(Path.cwd())
    serve(
        BridgeAPI.from_config(cfg),
        host = args.host or cfg["host"],
        port = args.port or cfg["port"],
    )
