"""Environment configuration for the Ollama manager.

Values come from the process environment after ``.env`` and ``.env.local``
next to the scripts have been loaded. Command overrides are shell-split.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from validators import split_command, validate_port, validate_timeout

SCRIPT_DIR = Path(__file__).resolve().parent
DEFAULT_LOG_FILE = SCRIPT_DIR / "ollama-manager.log"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 11434
DEFAULT_FETCH_TIMEOUT = 10.0

DEFAULT_STOP_CMD = ["sudo", "systemctl", "stop", "ollama.service"]
DEFAULT_RESTART_CMD = ["sudo", "systemctl", "restart", "ollama.service"]
DEFAULT_INSTALL_CMD = ["sh", "-c", "curl -fsSL https://ollama.com/install.sh | sh"]
DEFAULT_CONFIG_CMD = ["sudo", "systemctl", "edit", "ollama.service"]


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ManagerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    log_file: Path = DEFAULT_LOG_FILE
    config_cmd: List[str] = field(default_factory=lambda: list(DEFAULT_CONFIG_CMD))
    stop_cmd: List[str] = field(default_factory=lambda: list(DEFAULT_STOP_CMD))
    restart_cmd: List[str] = field(default_factory=lambda: list(DEFAULT_RESTART_CMD))
    install_cmd: List[str] = field(default_factory=lambda: list(DEFAULT_INSTALL_CMD))

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


def load_env_files(script_dir: Path = SCRIPT_DIR) -> None:
    load_dotenv(script_dir / ".env")
    load_dotenv(script_dir / ".env.local")


def _command(env: Mapping[str, str], key: str, default: List[str]) -> List[str]:
    parsed = split_command(env.get(key), name=key)
    if not parsed.is_valid:
        raise ConfigError(parsed.error)
    return parsed.value or list(default)


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    host: Optional[str] = None,
    port: Optional[str] = None,
) -> ManagerConfig:
    """Build a ``ManagerConfig``; ``host``/``port`` override the environment."""
    if env is None:
        load_env_files()
        env = os.environ

    port_result = validate_port(port or env.get("OLLAMA_PORT"), default=DEFAULT_PORT, name="OLLAMA_PORT")
    if not port_result.is_valid:
        raise ConfigError(port_result.error)
    timeout_result = validate_timeout(
        env.get("OLLAMA_FETCH_TIMEOUT"), default=DEFAULT_FETCH_TIMEOUT, name="OLLAMA_FETCH_TIMEOUT"
    )
    if not timeout_result.is_valid:
        raise ConfigError(timeout_result.error)

    raw_host = (host or env.get("OLLAMA_HOST") or DEFAULT_HOST).strip()
    # OLLAMA_HOST is also the server bind address, so it may carry a port or 0.0.0.0.
    if raw_host.startswith("http://"):
        raw_host = raw_host[len("http://"):]
    if ":" in raw_host:
        raw_host = raw_host.split(":", 1)[0]
    if raw_host in ("", "0.0.0.0"):
        raw_host = DEFAULT_HOST

    log_file = env.get("OLLAMA_MANAGER_LOG")
    return ManagerConfig(
        host=raw_host,
        port=port_result.value,
        fetch_timeout=timeout_result.value,
        log_file=Path(log_file).expanduser() if log_file else DEFAULT_LOG_FILE,
        config_cmd=_command(env, "OLLAMA_CONFIG_CMD", DEFAULT_CONFIG_CMD),
        stop_cmd=_command(env, "OLLAMA_STOP_CMD", DEFAULT_STOP_CMD),
        restart_cmd=_command(env, "OLLAMA_RESTART_CMD", DEFAULT_RESTART_CMD),
        install_cmd=_command(env, "OLLAMA_INSTALL_CMD", DEFAULT_INSTALL_CMD),
    )


def configure_logging(config: ManagerConfig) -> None:
    logging.basicConfig(filename=config.log_file, level=logging.INFO, format="[%(asctime)s] %(message)s")
