"""
callbridge/cli.py
Command-line interface for the Call Log Bridge.
Works on Linux, Mac, Windows (through adb) and Android Termux.

USAGE:
  callbridge --calls-since 1704067200000
  callbridge --calls-since 0 --xml-dir /sdcard/SMSBackup
  callbridge --launch com.android.chrome
  callbridge --launch com.android.chrome --adb --adb-serial emulator-5554
  callbridge --shared-text "hello"
  callbridge --call com.example.calllog/launcher launchApp --args '{"packageName": "com.android.chrome"}'
  callbridge --serve --port 8765
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from callbridge.config import ConfigError, ensure_config
from callbridge.models.record import ACTION_SEND, MIME_TEXT_PLAIN, Activation

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'callbridge',
        description = 'Call Log Bridge: call log, shared text and app launch channels',
        formatter_class = argparse.RawDescriptionHelpFormatter,
    )

    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument(
        '--calls-since',
        type    = int,
        metavar = 'TIMESTAMP_MS',
        help    = 'Print calls at or after this epoch-millisecond timestamp as JSON',
    )
    action.add_argument(
        '--launch',
        metavar = 'PACKAGE',
        help    = 'Bring an installed application to the foreground',
    )
    action.add_argument(
        '--shared-text',
        metavar = 'TEXT',
        help    = 'Simulate an inbound text share, then read it back through the share channel',
    )
    action.add_argument(
        '--call',
        nargs   = 2,
        metavar = ('CHANNEL', 'METHOD'),
        help    = 'Dispatch a raw command',
    )
    action.add_argument(
        '--serve',
        action  = 'store_true',
        help    = 'Run the HTTP transport (FastAPI + uvicorn)',
    )

    parser.add_argument(
        '--args',
        default = '{}',
        help    = 'JSON object of arguments for --call (default: {})',
    )
    parser.add_argument(
        '--db',
        type    = Path,
        help    = 'SQLite call log database (selects the sqlite store)',
    )
    parser.add_argument(
        '--xml-dir', '-d',
        type    = Path,
        help    = 'Directory containing calls-*.xml (selects the xml store)',
    )
    parser.add_argument(
        '--adb',
        action  = 'store_true',
        help    = 'Launch apps through adb shell instead of on-device tools',
    )
    parser.add_argument(
        '--adb-serial',
        help    = 'adb device serial (implies --adb)',
    )
    parser.add_argument(
        '--config-dir',
        type    = Path,
        default = None,
        help    = 'Directory holding callbridge_config.json (default: cwd)',
    )
    parser.add_argument('--host', default=None, help='Bind host for --serve')
    parser.add_argument('--port', type=int, default=None, help='Bind port for --serve')
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging',
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    logging.basicConfig(
        level   = logging.DEBUG if args.verbose else logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
        stream  = sys.stderr,
    )

    # ── CONFIG ───────────────────────────────────────────────
    overrides = {}
    if args.db:
        overrides.update(call_store='sqlite', db_path=str(args.db))
    if args.xml_dir:
        overrides.update(call_store='xml', xml_dir=str(args.xml_dir))
    if args.adb or args.adb_serial:
        overrides['use_adb'] = True
        if args.adb_serial:
            overrides['adb_serial'] = args.adb_serial

    try:
        config = ensure_config(args.config_dir)
        config.update(overrides)
        from callbridge.api import BridgeAPI
        bridge = BridgeAPI.from_config(config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # ── ACTIONS ──────────────────────────────────────────────
    if args.serve:
        from callbridge.api import serve
        serve(bridge, host=args.host or config['host'], port=args.port or config['port'])
        return 0

    if args.calls_since is not None:
        result = bridge.dispatch(bridge.channel('call_log'), 'getCallsSince',
                                 {'timestamp': args.calls_since})
    elif args.launch is not None:
        result = bridge.dispatch(bridge.channel('launcher'), 'launchApp',
                                 {'packageName': args.launch})
    elif args.shared_text is not None:
        bridge.on_activation(Activation(ACTION_SEND, MIME_TEXT_PLAIN, args.shared_text))
        result = bridge.dispatch(bridge.channel('share'), 'getSharedText')
    else:
        try:
            call_args = json.loads(args.args)
        except json.JSONDecodeError as e:
            print(f"Error: --args is not valid JSON: {e}", file=sys.stderr)
            return 1
        channel, method = args.call
        result = bridge.dispatch(channel, method, call_args)

    print(json.dumps(result.to_dict(), indent=2))
    if not result.is_success:
        return 1
    if args.launch is not None and result.result is False:
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
