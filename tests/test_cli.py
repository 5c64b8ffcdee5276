"""
tests/test_cli.py
CLI argument handling and exit codes.
"""

import json
import sqlite3

import pytest

from callbridge import cli


def _make_db(tmp_path):
    db = tmp_path / "calls.db"
    conn = sqlite3.connect(str(db))
    conn.executescript("""
        CREATE TABLE calls (timestamp_ms INTEGER, call_type INTEGER,
                            phone_number TEXT, duration_sec INTEGER);
        INSERT INTO calls VALUES (1000, 1, '+1111', 5), (2000, 2, '+2222', 7);
    """)
    conn.commit()
    conn.close()
    return db


class TestCli:

    def test_calls_since(self, tmp_path, capsys):
        db = _make_db(tmp_path)
        code = cli.main(["--calls-since", "1500", "--db", str(db), "--config-dir", str(tmp_path)])
        out = json.loads(capsys.readouterr().out)
        assert code == 0
        assert out["result"] == [{"number": "+2222", "date": 2000, "type": 2, "duration": 7}]

    def test_calls_since_missing_db_prints_empty(self, tmp_path, capsys):
        code = cli.main(["--calls-since", "0", "--db", str(tmp_path / "nope.db"),
                         "--config-dir", str(tmp_path)])
        assert code == 0
        assert json.loads(capsys.readouterr().out)["result"] == []

    def test_shared_text_round_trip(self, tmp_path, capsys):
        code = cli.main(["--shared-text", "hello", "--config-dir", str(tmp_path)])
        assert code == 0
        assert json.loads(capsys.readouterr().out) == {"status": "success", "result": "hello"}

    def test_raw_call_not_implemented(self, tmp_path, capsys):
        code = cli.main(["--call", "com.example.calllog/share", "nope", "--config-dir", str(tmp_path)])
        assert code == 1
        assert json.loads(capsys.readouterr().out)["status"] == "not_implemented"

    def test_raw_call_bad_json(self, tmp_path):
        code = cli.main(["--call", "com.example.calllog/launcher", "launchApp",
                         "--args", "{nope", "--config-dir", str(tmp_path)])
        assert code == 1

    def test_raw_call_invalid_argument(self, tmp_path, capsys):
        code = cli.main(["--call", "com.example.calllog/launcher", "launchApp",
                         "--args", "{}", "--config-dir", str(tmp_path)])
        assert code == 1
        assert json.loads(capsys.readouterr().out)["code"] == "INVALID_ARGUMENT"

    def test_launch_failure_exit_code(self, tmp_path, capsys, monkeypatch):
        from callbridge.services.launcher import LaunchService
        monkeypatch.setattr(LaunchService, "launch_app", lambda self, pkg: False)
        code = cli.main(["--launch", "pkg.none", "--config-dir", str(tmp_path)])
        assert code == 1
        assert json.loads(capsys.readouterr().out)["result"] is False

    def test_action_required(self):
        with pytest.raises(SystemExit):
            cli.main([])

    def test_bad_config_exits_1(self, tmp_path):
        (tmp_path / "callbridge_config.json").write_text('{"call_store": "contacts"}', encoding="utf-8")
        assert cli.main(["--calls-since", "0", "--config-dir", str(tmp_path)]) == 1

    @pytest.mark.parametrize("argv,prefix", [
        (["--adb"], ["adb", "-s", "emulator-5554", "shell"]),
        (["--adb-serial", "R58M123"], ["adb", "-s", "R58M123", "shell"]),
    ])
    def test_adb_serial_from_config_kept(self, tmp_path, capsys, monkeypatch, argv, prefix):
        from callbridge.services.launcher import LaunchService
        (tmp_path / "callbridge_config.json").write_text(
            '{"adb_serial": "emulator-5554"}', encoding="utf-8")
        seen = []

        def fake_launch(self, pkg):
            seen.append(self.pm.prefix)
            return True

        monkeypatch.setattr(LaunchService, "launch_app", fake_launch)
        code = cli.main(["--launch", "com.android.chrome", *argv, "--config-dir", str(tmp_path)])
        assert code == 0
        assert seen == [prefix]
