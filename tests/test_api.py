"""
tests/test_api.py
─────────────────────────────────────────────────────────────────────────────
Tests for callbridge.api: BridgeAPI facade and the FastAPI transport.

Coverage:
  - from_config: store selection, adb prefix, channel prefix
  - end-to-end dispatch over a temporary SQLite call log
  - activation / foreground lifecycle feeding the share channel
  - HTTP endpoints via TestClient (status codes per result kind)

All tests use a temporary SQLite DB and a faked package manager.
"""

import sqlite3
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from callbridge.api import BridgeAPI, _build_app
from callbridge.config import ConfigError
from callbridge.models.record import ACTION_SEND, MIME_TEXT_PLAIN, Activation
from callbridge.platform.base import PackageManager
from callbridge.platform.shell import ShellPackageManager
from callbridge.stores.sqlite_store import SqliteCallLogStore
from callbridge.stores.xml_store import XmlBackupCallLogStore


# ── HELPERS ──────────────────────────────────────────────────────────────────

def _make_db(tmp_path: Path) -> Path:
    db = tmp_path / "callbridge.db"
    conn = sqlite3.connect(str(db))
    conn.executescript("""
        CREATE TABLE calls (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            timestamp_ms INTEGER, date_str TEXT, call_type INTEGER,
            contact_name TEXT, phone_number TEXT,
            duration_sec INTEGER, duration_fmt TEXT, source_file TEXT
        );
        INSERT INTO calls (timestamp_ms, call_type, phone_number, duration_sec)
        VALUES (1704067200000, 1, '+16125550001', 120),
               (1704067500000, 3, '+16125550002', 0),
               (1704067800000, 2, '+16125550001', 300);
    """)
    conn.commit()
    conn.close()
    return db


@pytest.fixture
def pm():
    pm = MagicMock(spec=PackageManager)
    pm.get_launch_intent.return_value = None
    pm.query_intent_activities.return_value = []
    return pm


@pytest.fixture
def bridge(tmp_path, pm):
    return BridgeAPI(store=SqliteCallLogStore(_make_db(tmp_path)), package_manager=pm)


@pytest.fixture
def client(bridge):
    return TestClient(_build_app(bridge))


# ── FROM CONFIG ──────────────────────────────────────────────────────────────

class TestFromConfig:

    def test_sqlite_store_default(self, tmp_path):
        bridge = BridgeAPI.from_config({"db_path": str(tmp_path / "x.db")})
        assert isinstance(bridge.history.store, SqliteCallLogStore)
        assert isinstance(bridge.launcher.pm, ShellPackageManager)
        assert bridge.launcher.pm.prefix == []

    def test_xml_store(self, tmp_path):
        bridge = BridgeAPI.from_config({"call_store": "xml", "xml_dir": str(tmp_path)})
        assert isinstance(bridge.history.store, XmlBackupCallLogStore)

    def test_adb_serial(self):
        bridge = BridgeAPI.from_config({"adb_serial": "emulator-5554", "launcher_timeout_sec": 3})
        assert bridge.launcher.pm.prefix == ["adb", "-s", "emulator-5554", "shell"]
        assert bridge.launcher.pm.timeout == 3.0

    def test_channel_prefix(self):
        bridge = BridgeAPI.from_config({"channel_prefix": "org.acme"})
        assert bridge.channel("share") == "org.acme/share"
        assert "org.acme/share" in bridge.dispatcher.channel_names

    def test_invalid_store_rejected(self):
        with pytest.raises(ConfigError):
            BridgeAPI.from_config({"call_store": "contacts"})


# ── IN-PROCESS ───────────────────────────────────────────────────────────────

class TestBridgeAPI:

    def test_get_calls_since(self, bridge):
        calls = bridge.get_calls_since(1704067500000)
        assert [c.timestamp_ms for c in calls] == [1704067800000, 1704067500000]

    def test_dispatch_calls(self, bridge):
        result = bridge.dispatch(bridge.channel("call_log"), "getCallsSince", {"timestamp": 0})
        assert result.result[0] == {
            "number": "+16125550001", "date": 1704067800000, "type": 2, "duration": 300,
        }

    def test_activation_then_share_channel(self, bridge):
        bridge.on_activation(Activation(ACTION_SEND, MIME_TEXT_PLAIN, "hello"))
        assert bridge.dispatch(bridge.channel("share"), "getSharedText").result == "hello"
        assert bridge.dispatch(bridge.channel("share"), "getSharedText").result is None

    def test_foreground_replays_last_share(self, bridge):
        bridge.on_activation(Activation(ACTION_SEND, MIME_TEXT_PLAIN, "hello"))
        bridge.take_shared_text()
        bridge.on_foreground()
        assert bridge.take_shared_text() == "hello"

    def test_launch_no_entry_no_handler(self, bridge, pm):
        assert bridge.launch_app("pkg.no.entry.no.handler") is False
        pm.start_activity.assert_not_called()


# ── HTTP ─────────────────────────────────────────────────────────────────────

class TestHttp:

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert "com.example.calllog/call_log" in body["channels"]

    def test_dispatch_success(self, client):
        r = client.post("/channels/com.example.calllog/call_log/getCallsSince",
                        json={"timestamp": 1704067800000})
        assert r.status_code == 200
        assert r.json() == {
            "status": "success",
            "result": [{"number": "+16125550001", "date": 1704067800000, "type": 2, "duration": 300}],
        }

    def test_dispatch_invalid_argument(self, client):
        r = client.post("/channels/com.example.calllog/call_log/getCallsSince", json={})
        assert r.status_code == 400
        assert r.json()["code"] == "INVALID_ARGUMENT"

    def test_dispatch_not_implemented(self, client):
        r = client.post("/channels/com.example.calllog/call_log/deleteCalls", json={})
        assert r.status_code == 501
        assert r.json() == {"status": "not_implemented"}

    def test_dispatch_without_body(self, client):
        r = client.post("/channels/com.example.calllog/share/getSharedText")
        assert r.status_code == 200
        assert r.json() == {"status": "success", "result": None}

    def test_activation_and_foreground(self, client):
        r = client.post("/activations", json={
            "action": ACTION_SEND, "mime_type": MIME_TEXT_PLAIN, "text": "shared",
        })
        assert r.status_code == 200
        share = "/channels/com.example.calllog/share/getSharedText"
        assert client.post(share).json()["result"] == "shared"
        assert client.post(share).json()["result"] is None
        client.post("/lifecycle/foreground")
        assert client.post(share).json()["result"] == "shared"

    def test_launch(self, client, pm):
        pm.query_intent_activities.return_value = ["pkg.x/.Main"]
        r = client.post("/channels/com.example.calllog/launcher/launchApp",
                        json={"packageName": "pkg.x"})
        assert r.json() == {"status": "success", "result": True}
        pm.start_activity.assert_called_once()
