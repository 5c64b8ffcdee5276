"""
callbridge/platform/shell.py
PackageManager backed by Android's shell tools.

Runs on-device (Termux: `cmd`, `am` on PATH) or from a workstation through
`adb shell` / `adb -s <serial> shell`.

  get_launch_intent        → cmd package resolve-activity --brief -c LAUNCHER <pkg>
  query_intent_activities  → cmd package query-activities --brief <intent args>
  start_activity           → am start <intent args>

No shell string is ever built; arguments are passed as a list.
"""

import logging
import subprocess
from typing import Callable, List, Optional, Sequence

from callbridge.platform.base import (
    ACTION_MAIN,
    CATEGORY_LAUNCHER,
    FLAG_ACTIVITY_NEW_TASK,
    Intent,
    PackageManager,
)

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


class ShellCommandError(RuntimeError):
    pass


def adb_prefix(serial: Optional[str] = None) -> List[str]:
    if serial:
        return ['adb', '-s', serial, 'shell']
    return ['adb', 'shell']


class ShellPackageManager(PackageManager):

    def __init__(
        self,
        prefix:  Sequence[str] = (),
        timeout: float         = 10.0,
        runner:  Runner        = subprocess.run,
    ):
        self.prefix  = list(prefix)
        self.timeout = timeout
        self._run    = runner

    # ── INTERNAL ──────────────────────────────────────────────────────────

    def _exec(self, args: List[str]) -> str:
        cmd = self.prefix + args
        logger.debug(f"exec: {' '.join(cmd)}")
        proc = self._run(
            cmd,
            capture_output = True,
            text           = True,
            timeout        = self.timeout,
            check          = False,
        )
        out = (proc.stdout or '') + (proc.stderr or '')
        if proc.returncode != 0:
            raise ShellCommandError(f"{args[0]} exited {proc.returncode}: {out.strip()[:200]}")
        return out

    @staticmethod
    def _intent_args(intent: Intent) -> List[str]:
        args: List[str] = []
        if intent.action:
            args += ['-a', intent.action]
        for category in intent.categories:
            args += ['-c', category]
        if intent.flags:
            args += ['-f', str(intent.flags)]
        if intent.component:
            args += ['-n', intent.component]
        elif intent.package:
            args.append(intent.package)
        return args

    @staticmethod
    def _components(output: str) -> List[str]:
        found = []
        for line in output.splitlines():
            line = line.strip()
            if '/' in line and '=' not in line and ' ' not in line:
                found.append(line)
        return found

    # ── PACKAGE MANAGER ───────────────────────────────────────────────────

    def get_launch_intent(self, package: str) -> Optional[Intent]:
        out = self._exec([
            'cmd', 'package', 'resolve-activity', '--brief',
            '-c', CATEGORY_LAUNCHER, package,
        ])
        components = self._components(out)
        if not components:
            return None
        return Intent(
            action     = ACTION_MAIN,
            package    = package,
            component  = components[-1],
            categories = (CATEGORY_LAUNCHER,),
            flags      = FLAG_ACTIVITY_NEW_TASK,
        )

    def query_intent_activities(self, intent: Intent) -> List[str]:
        out = self._exec(['cmd', 'package', 'query-activities', '--brief'] + self._intent_args(intent))
        return self._components(out)

    def start_activity(self, intent: Intent) -> None:
        out = self._exec(['am', 'start'] + self._intent_args(intent))
        # am start exits 0 on some resolution failures and reports on stdout
        if 'Error' in out:
            raise ShellCommandError(out.strip()[:200])
