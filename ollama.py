#!/usr/bin/env python3
"""Thin client for a local Ollama install: the model API plus the ``ollama`` CLI."""
from __future__ import annotations

import json
import logging
import os
import shutil
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence
from urllib.error import URLError
from urllib.request import urlopen

from config import ManagerConfig
from menu_state import Item
from process_utils import run_command
from tui_base import ActionError, FetchError

logger = logging.getLogger(__name__)

Runner = Callable[..., int]

SERVICE_ACTIONS = ("config", "stop", "restart", "install")


def log(msg: str) -> None:
    print(msg, flush=True)
    logger.info(msg)


def parse_modified_at(value: object) -> Optional[date]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.split("T", 1)[0]).date()
    except ValueError:
        return None


def parse_models(payload: object) -> List[Item]:
    """Turn an ``/api/tags`` response into name-sorted items."""
    if not isinstance(payload, dict) or not isinstance(payload.get("models"), list):
        raise FetchError("Malformed response from Ollama API: missing 'models' list")
    items: List[Item] = []
    for entry in payload["models"]:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise FetchError("Malformed response from Ollama API: model without a name")
        try:
            size = int(entry.get("size") or 0)
        except (TypeError, ValueError):
            size = 0
        items.append(Item(name=str(entry["name"]), size_bytes=size, modified_at=parse_modified_at(entry.get("modified_at"))))
    return sorted(items, key=lambda item: item.name)


class OllamaClient:
    def __init__(self, config: ManagerConfig, *, runner: Runner = run_command) -> None:
        self.config = config
        self._runner = runner

    # -- API --------------------------------------------------------------

    def fetch_models(self) -> List[Item]:
        url = f"{self.config.base_url}/api/tags"
        try:
            with urlopen(url, timeout=self.config.fetch_timeout) as resp:
                data = json.load(resp)
        except (URLError, OSError) as exc:
            raise FetchError(f"Could not fetch models from Ollama API at {self.config.base_url}: {exc}") from exc
        except ValueError as exc:
            raise FetchError(f"Ollama API returned invalid JSON: {exc}") from exc
        return parse_models(data)

    def is_responsive(self) -> bool:
        """Ping the API root with a short timeout."""
        try:
            with urlopen(self.config.base_url, timeout=3):
                return True
        except (URLError, OSError):
            return False

    # -- CLI --------------------------------------------------------------

    def _env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env["OLLAMA_HOST"] = f"{self.config.host}:{self.config.port}"
        return env

    def is_installed(self) -> bool:
        return shutil.which("ollama") is not None

    def _ollama(self, *args: str) -> int:
        if not self.is_installed():
            raise ActionError("'ollama' command not found. Install it from https://ollama.com")
        return self._runner(["ollama", *args], env=self._env())

    def _each(self, verb: str, names: Sequence[str], cli_args: Callable[[str], List[str]]) -> List[str]:
        failed: List[str] = []
        total = len(names)
        log(f"{verb} {total} model(s)...")
        for idx, name in enumerate(names, start=1):
            log(f"({idx}/{total}) {verb} {name}...")
            if self._ollama(*cli_args(name)) != 0:
                log(f"Failed: {name}")
                failed.append(name)
        if failed:
            log(f"Finished, but {len(failed)} model(s) failed: {' '.join(failed)}")
        else:
            log("Finished successfully.")
        return failed

    def pull_model(self, name: str) -> List[str]:
        return self._each("Pulling", [name], lambda n: ["pull", n])

    def delete_models(self, names: Sequence[str]) -> List[str]:
        return self._each("Deleting", list(names), lambda n: ["rm", n])

    def update_models(self, names: Sequence[str]) -> List[str]:
        # ``ollama pull`` on an installed model fetches newer layers.
        return self._each("Updating", list(names), lambda n: ["pull", n])

    def run_model(self, name: str) -> int:
        log(f"Starting model: {name} (type '/bye' to exit)")
        return self._ollama("run", name)

    def service_command(self, action: str) -> List[str]:
        if action not in SERVICE_ACTIONS:
            raise ValueError(f"Unknown service action: {action}")
        return list(getattr(self.config, f"{action}_cmd"))

    def run_service_action(self, action: str) -> int:
        cmd = self.service_command(action)
        log(f"Running {action}: {' '.join(cmd)}")
        return self._runner(cmd, env=self._env())
