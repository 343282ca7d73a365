"""Завантаження YAML конфігурацій з підстановкою змінних оточення.

Рядкові значення можуть посилатися на змінні оточення як ``${NAME}``
або ``${NAME:-default}``; це зручно для секретів на кшталт API-ключа::

    api:
      api_key: ${FINGRID_API_KEY:-}
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from src.shared.errors import ConfigError

log = logging.getLogger(__name__)

_ENV_REF = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}")


def expand_env(value: Any) -> Any:
    """Рекурсивно підставляє ``${NAME}`` у рядках словників і списків.

    Raises:
        ConfigError: Якщо змінна не задана і не має значення за замовчуванням.
    """
    if isinstance(value, dict):
        return {k: expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env(v) for v in value]
    if not isinstance(value, str):
        return value

    def _sub(m: re.Match[str]) -> str:
        name, default = m.group("name"), m.group("default")
        if name in os.environ:
            return os.environ[name]
        if default is None:
            raise ConfigError(f"Environment variable {name} is not set")
        return default

    return _ENV_REF.sub(_sub, value)


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Зчитує YAML файл та повертає його вміст як dict.

    Args:
        path: Шлях до файлу.

    Returns:
        Вміст файлу як словник (порожній файл → ``{}``).

    Raises:
        FileNotFoundError: Якщо файл не знайдено.
        ConfigError: Якщо YAML некоректний або верхній рівень не словник.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config {p.name} is not valid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {p.name} must be a mapping, got {type(data).__name__}")
    log.debug("Loaded config %s (%d top-level keys)", p.name, len(data))
    return expand_env(data)
