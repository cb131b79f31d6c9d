#!/usr/bin/env python3
"""Example legacy plugin that reports (and optionally changes) a file's mode.

Run it the way the orchestrator does::

    python samples/file_attrs_plugin.py samples/file_attrs.args

or inline, without output capture, while developing::

    python samples/file_attrs_plugin.py --args 'path=/tmp/demo.txt mode=0640'
"""

from __future__ import annotations

import os
import stat
import subprocess
from pathlib import Path

from legacymod import ModuleSession, Raw, StringLiteral, run_module

DECLARATION = ["path", "mode", "owner", "check_cmd"]


def main(session: ModuleSession) -> None:
    path_value = session.args.get("path")
    if not path_value:
        session.fail_json("missing required argument: path")

    path = Path(path_value)
    if not path.exists():
        session.fail_json(f"{path} does not exist", rc=2, path=str(path))

    # Printed output lands in the captured "stdout" member of the response.
    print(f"inspecting {path}")

    check_cmd = session.args.get("check_cmd")
    if check_cmd:
        # A failing command is reported automatically as a failed response.
        subprocess.run(["sh", "-c", check_cmd], check=True)

    changed = False
    requested = session.args.get("mode")
    current = stat.S_IMODE(path.stat().st_mode)
    if requested and int(requested, 8) != current:
        os.chmod(path, int(requested, 8))
        changed = True
        current = int(requested, 8)

    session.set("mode", f"{current:04o}")
    session.exit_json(
        Raw("failed", "false"),
        Raw("changed", "true" if changed else "false"),
        StringLiteral("msg", "File altered" if changed else "File unchanged"),
        "mode",
        path=str(path),
    )


if __name__ == "__main__":
    raise SystemExit(run_module(main, DECLARATION))
