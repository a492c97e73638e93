"""Coalesce changed theme files into Theme Kit deploys.

A ``ThemeDeployer`` owns the pending file set and the busy flag. ``sync``
merges paths into the pending set and starts a deploy when none is running;
paths submitted while a deploy is in flight wait for the next ``sync`` or
``attempt_deploy`` call. Nothing drains the set automatically when a deploy
finishes.

Theme Kit failures are logged and reported on the returned ``DeployResult``
with status ``failed``; they are never raised to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from slate_sync.config import settings
from slate_sync.schemas import DeployMode, DeployResult
from slate_sync.slate_env import SlateEnvironment, load_slate_environment
from slate_sync.themekit import ThemeKitClient

logger = logging.getLogger(__name__)

_DEPLOY_MODES: tuple[str, ...] = ("upload", "replace")


class EmptyInputError(ValueError):
    pass


class DeployInProgressError(RuntimeError):
    pass


def generate_config_flags(environment: SlateEnvironment) -> dict[str, Any]:
    """Theme Kit flags shared by the configure and deploy steps."""
    environment.ensure_valid()

    flags: dict[str, Any] = {
        "password": environment.password,
        "themeid": environment.theme_id,
        "store": environment.store,
        "env": environment.env_name,
    }
    if environment.timeout:
        flags["timeout"] = environment.timeout
    if environment.ignore_files:
        flags["ignored_files"] = environment.ignore_files
    return flags


class ThemeDeployer:
    def __init__(
        self,
        *,
        env_name: str | None = None,
        themekit: ThemeKitClient | None = None,
        environment_loader: Callable[[str | None], SlateEnvironment] = load_slate_environment,
        theme_dir: Path | str | None = None,
    ) -> None:
        self._env_name = env_name
        self._themekit = themekit or ThemeKitClient()
        self._environment_loader = environment_loader
        self._theme_dir = Path(theme_dir) if theme_dir is not None else settings.theme_dist_dir
        # dict keeps first-seen order while deduplicating.
        self._pending: dict[str, None] = {}
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def pending_files(self) -> list[str]:
        return list(self._pending)

    async def sync(self, files: Sequence[str]) -> DeployResult:
        if not files:
            raise EmptyInputError("No files to deploy.")
        for path in files:
            self._pending.setdefault(path, None)
        return await self.attempt_deploy()

    async def attempt_deploy(self) -> DeployResult:
        if self._busy:
            raise DeployInProgressError("Deploy already in progress.")
        if not self._pending:
            return DeployResult(status="skipped")

        # No await between the busy check, the snapshot and marking busy.
        files = list(self._pending)
        self._pending.clear()
        self._busy = True
        return await self._run(mode="upload", files=files, overlapped=False)

    async def upload(self) -> DeployResult:
        return await self.deploy("upload")

    async def replace(self) -> DeployResult:
        return await self.deploy("replace")

    async def deploy(self, mode: str, files: Sequence[str] | None = None) -> DeployResult:
        if mode not in _DEPLOY_MODES:
            raise ValueError('deploy() mode must be either "upload" or "replace"')

        # Forced deploys do not wait for, or reject on, an in-flight deploy.
        overlapped = self._busy
        if overlapped:
            logger.warning("Starting a forced %s while another deploy is still in progress", mode)
        self._busy = True
        return await self._run(mode=mode, files=list(files) if files else None, overlapped=overlapped)

    async def _run(self, *, mode: DeployMode, files: list[str] | None, overlapped: bool) -> DeployResult:
        error: str | None = None
        try:
            logger.info("Uploading to Shopify...")
            try:
                await self._configure()
            except Exception as exc:
                logger.exception("Theme Kit configure step failed")
                error = str(exc)
            try:
                await self._deploy_files(mode=mode, files=files)
            except Exception as exc:
                logger.exception("Theme Kit deploy step failed")
                error = error or str(exc)
        finally:
            self._busy = False

        return DeployResult(
            mode=mode,
            files=files or [],
            status="failed" if error else "completed",
            error=error,
            overlapped=overlapped,
        )

    def _config_flags(self) -> dict[str, Any]:
        return generate_config_flags(self._environment_loader(self._env_name))

    async def _configure(self) -> None:
        flags = self._config_flags()
        await self._themekit.command("configure", flags, cwd=self._theme_dir)

    async def _deploy_files(self, *, mode: DeployMode, files: list[str] | None) -> None:
        flags = self._config_flags()
        if files:
            flags["files"] = files
        if mode == "upload":
            flags["nodelete"] = True
        # Callers confirm pushes to the published theme before reaching here.
        flags["allow-live"] = True
        await self._themekit.command("deploy", flags, cwd=self._theme_dir)
