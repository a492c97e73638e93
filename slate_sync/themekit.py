from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from slate_sync.config import settings

logger = logging.getLogger(__name__)

_OUTPUT_TAIL_CHARS = 4000
_MASK = "********"


class ThemeKitError(RuntimeError):
    def __init__(self, *, message: str, returncode: int | None = None, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output


def build_command_args(command: str, flags: Mapping[str, Any]) -> list[str]:
    """Translate a flag mapping into Theme Kit arguments, keeping mapping order.

    ``files`` become positional paths and ``ignored_files`` expand to one
    ``--ignored-file`` per entry. Booleans are bare switches and ``None`` is
    dropped.
    """
    args = [command]
    for key, value in flags.items():
        if value is None:
            continue
        if key == "files":
            args.extend(str(path) for path in value)
        elif key == "ignored_files":
            for path in value:
                args.extend(["--ignored-file", str(path)])
        elif isinstance(value, bool):
            if value:
                args.append(f"--{key}")
        else:
            args.extend([f"--{key}", str(value)])
    return args


def _mask_secret(args: list[str], secret: str | None) -> list[str]:
    if not secret:
        return list(args)
    return [_MASK if arg == secret else arg for arg in args]


class ThemeKitClient:
    def __init__(self, *, binary: str | None = None) -> None:
        self._binary = binary or settings.SLATE_SYNC_THEMEKIT_BIN

    def resolve_binary(self) -> str:
        resolved = shutil.which(self._binary)
        if not resolved:
            raise ThemeKitError(
                message=f"Theme Kit binary '{self._binary}' not found in PATH. Install Theme Kit or set SLATE_SYNC_THEMEKIT_BIN."
            )
        return resolved

    async def command(self, command: str, flags: Mapping[str, Any], *, cwd: Path | str) -> str:
        binary = self.resolve_binary()
        args = build_command_args(command, flags)
        logger.debug("Running %s %s in %s", binary, " ".join(_mask_secret(args, flags.get("password"))), cwd)

        proc = await asyncio.create_subprocess_exec(
            binary,
            *args,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )

        lines: list[str] = []
        assert proc.stdout
        async for raw in proc.stdout:
            line = raw.decode(errors="ignore").rstrip()
            lines.append(line)
            if line:
                logger.info("[theme %s] %s", command, line)

        rc = await proc.wait()
        output = "\n".join(lines)
        if rc != 0:
            raise ThemeKitError(
                message=f"Theme Kit '{command}' exited with status {rc}",
                returncode=rc,
                output=output[-_OUTPUT_TAIL_CHARS:],
            )
        return output
