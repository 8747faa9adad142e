# analysis/movement/config.py
"""Runtime overrides for `DetectorConfig`.

Overrides come from two places, applied in order:

1. A config module: the one named by ``MOVEDETECT_CONFIG_MODULE``, else the
   first importable of ``config`` / ``common.config``. Module-level names
   matching a `DetectorConfig` field (case-insensitive) are used.
2. ``MOVEDETECT_<FIELD>`` environment variables, e.g.
   ``MOVEDETECT_SIMILARITY_THRESHOLD=28``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import fields, replace
from importlib import import_module
from types import ModuleType
from typing import Any, Optional

from .model import ConfigError, DetectorConfig

_LOG = logging.getLogger(__name__)

ENV_PREFIX = "MOVEDETECT_"
ENV_MODULE = "MOVEDETECT_CONFIG_MODULE"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _find_config_module(env: Mapping[str, str]) -> Optional[ModuleType]:
    explicit = env.get(ENV_MODULE)
    if explicit:
        # An explicitly named module must exist.
        try:
            return import_module(explicit)
        except ImportError as exc:
            raise ConfigError(f"cannot import config module {explicit!r}: {exc}") from exc

    for name in ("config", "common.config"):
        try:
            return import_module(name)
        except ImportError:
            continue
    return None


def _coerce(name: str, raw: Any, default: Any) -> Any:
    if not isinstance(raw, str):
        return raw
    try:
        if isinstance(default, bool):
            val = raw.strip().lower()
            if val in _TRUE:
                return True
            if val in _FALSE:
                return False
            raise ValueError(f"not a boolean: {raw!r}")
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
        if isinstance(default, tuple):
            return tuple(int(p) for p in raw.replace(" ", "").split(","))
    except ValueError as exc:
        raise ConfigError(f"bad value for {name}: {raw!r}") from exc
    return raw


def overrides_from_module(module: ModuleType) -> dict[str, Any]:
    known = {f.name for f in fields(DetectorConfig)}
    out: dict[str, Any] = {}
    for key in dir(module):
        if key.startswith("_"):
            continue
        name = key.lower()
        if name in known:
            out[name] = getattr(module, key)
    return out


def overrides_from_env(env: Mapping[str, str]) -> dict[str, str]:
    known = {f.name for f in fields(DetectorConfig)}
    out: dict[str, str] = {}
    for key, value in env.items():
        if not key.startswith(ENV_PREFIX) or key == ENV_MODULE:
            continue
        name = key[len(ENV_PREFIX) :].lower()
        if name in known:
            out[name] = value
        else:
            _LOG.warning("Ignoring unknown movement config override %s", key)
    return out


def apply_overrides(base: DetectorConfig, overrides: Mapping[str, Any]) -> DetectorConfig:
    """Return ``base`` with ``overrides`` applied, coercing strings to each field's type."""
    defaults = {f.name: getattr(base, f.name) for f in fields(DetectorConfig)}
    changes: dict[str, Any] = {}
    for name, raw in overrides.items():
        if name not in defaults:
            _LOG.warning("Ignoring unknown movement config key %r", name)
            continue
        changes[name] = _coerce(name, raw, defaults[name])
    return replace(base, **changes)


def load_config(
    base: Optional[DetectorConfig] = None,
    env: Optional[Mapping[str, str]] = None,
) -> DetectorConfig:
    """Build a `DetectorConfig` from defaults, the config module and the environment."""
    env = os.environ if env is None else env
    cfg = base or DetectorConfig()

    module = _find_config_module(env)
    if module is not None:
        from_module = overrides_from_module(module)
        if from_module:
            _LOG.debug("Movement config from %s: %s", module.__name__, sorted(from_module))
        cfg = apply_overrides(cfg, from_module)

    from_env = overrides_from_env(env)
    if from_env:
        _LOG.debug("Movement config from environment: %s", sorted(from_env))
    return apply_overrides(cfg, from_env)
