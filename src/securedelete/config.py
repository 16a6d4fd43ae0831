import math
import os
import sys
from datetime import timedelta
from pathlib import Path
from typing import Any

import tomli_w
import tomlkit

from .managers.policy import (
    DEFAULT_GRACE_MINUTES,
    DEFAULT_HIGH_RISK_CATEGORIES,
    DEFAULT_REQUIRED_CODE,
    DEFAULT_THRESHOLD_COUNT,
    MAX_GRACE_MINUTES,
    DeletePolicy,
)

# tomllib is stdlib in Python 3.11+; tomli provides the same API before that.
if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover - platform dependent
    import tomli as tomllib


ENV_PREFIX = 'SECUREDELETE_'

# key -> (type name, code default)
_ALLOWED_KEYS: dict[str, tuple[str, Any]] = {
    'required_code': ('str', DEFAULT_REQUIRED_CODE),
    'high_risk_categories': ('list[str]', list(DEFAULT_HIGH_RISK_CATEGORIES)),
    'threshold_count': ('int', DEFAULT_THRESHOLD_COUNT),
    'grace_minutes': ('float', DEFAULT_GRACE_MINUTES),
    'notify_dropped': ('bool', False),
}


def _config_file_path() -> Path:
    xdg = os.getenv('XDG_CONFIG_HOME')
    if xdg:
        base = Path(xdg)
    else:
        base = Path.home() / '.config'
    return base / 'securedelete' / 'config.toml'


def load_config() -> dict[str, Any]:
    """Load TOML configuration from XDG config path. Returns empty dict on error."""
    p = _config_file_path()
    if not p.exists():
        return {}
    try:
        with p.open('rb') as f:
            data = tomllib.load(f)
            if isinstance(data, dict):
                return data
    except Exception:
        return {}
    return {}


def save_config(cfg: dict[str, Any]) -> bool:
    """Write a flat config dict to the XDG config TOML file, replacing it.

    Returns True on success, False otherwise.
    """
    p = _config_file_path()
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open('w', encoding='utf8') as f:
            f.write(tomli_w.dumps(cfg))
        return True
    except Exception:
        return False


def _update_config_file(key: str, value: Any) -> bool:
    """Set one key in an existing config file, keeping its comments and order."""
    p = _config_file_path()
    try:
        doc = tomlkit.parse(p.read_text(encoding='utf8'))
        doc[key] = value
        p.write_text(tomlkit.dumps(doc), encoding='utf8')
        return True
    except Exception:
        return False


def _parse_value_by_type(type_name: str, raw_value: Any):
    """Parse raw_value according to a small set of supported type names.

    Supported types: int, float, str, bool, list[str]
    Returns the parsed value or raises ValueError on parse error.
    """
    if raw_value is None:
        return None

    t = type_name.strip().lower()
    if t == 'int':
        if isinstance(raw_value, bool):
            raise ValueError(f"Invalid int value: {raw_value}")
        if isinstance(raw_value, float) and not raw_value.is_integer():
            raise ValueError(f"Invalid int value: {raw_value}")
        try:
            return int(raw_value)
        except Exception as e:
            raise ValueError(f"Invalid int value: {raw_value}") from e
    if t == 'float':
        if isinstance(raw_value, bool):
            raise ValueError(f"Invalid number: {raw_value}")
        try:
            value = float(raw_value)
        except Exception as e:
            raise ValueError(f"Invalid number: {raw_value}") from e
        if not math.isfinite(value):
            raise ValueError(f"Invalid number: {raw_value}")
        return value
    if t == 'str':
        return str(raw_value)
    if t == 'bool':
        if isinstance(raw_value, bool):
            return raw_value
        s = str(raw_value).strip().lower()
        if s in ('1', 'true', 'yes', 'on'):
            return True
        if s in ('0', 'false', 'no', 'off'):
            return False
        raise ValueError(f"Invalid boolean value: {raw_value}")
    if t == 'list[str]':
        if isinstance(raw_value, (list, tuple)):
            items = [str(i).strip() for i in raw_value]
        else:
            # accept comma-separated string
            items = [s.strip() for s in str(raw_value).split(',')]
        return [i for i in items if i]

    return raw_value


def validate_config_value(key: str, raw_value: Any):
    """Parse and range-check a value for ``key``.

    Returns the parsed value. Raises ValueError for unknown keys or invalid
    values.
    """
    if key not in _ALLOWED_KEYS:
        raise ValueError(f"Unsupported config key: {key}")
    type_name, _ = _ALLOWED_KEYS[key]
    parsed = _parse_value_by_type(type_name, raw_value)

    if key == 'required_code' and not parsed.strip():
        raise ValueError("required_code must not be empty")
    if key == 'threshold_count' and parsed < 1:
        raise ValueError(f"Value for threshold_count ({parsed}) is less than minimum 1")
    if key == 'grace_minutes' and parsed < 0:
        raise ValueError(f"Value for grace_minutes ({parsed}) is less than minimum 0")
    if key == 'grace_minutes' and parsed > MAX_GRACE_MINUTES:
        raise ValueError(f"Value for grace_minutes ({parsed}) is greater than maximum {MAX_GRACE_MINUTES:g}")
    return parsed


def set_config_value(key: str, value: Any) -> bool:
    """Set a single config key (with validation) and persist it.

    Returns True on success, False on validation or IO errors.
    """
    try:
        parsed = validate_config_value(key, value)
    except ValueError:
        return False

    if _config_file_path().exists() and _update_config_file(key, parsed):
        return True
    # missing or unparseable file: start over with what can still be read
    cfg = load_config() or {}
    cfg[key] = parsed
    return save_config(cfg)


def get_allowed_keys() -> dict[str, str]:
    """Return a mapping of supported keys to their type names."""
    return {k: t for k, (t, _) in _ALLOWED_KEYS.items()}


def get_effective_value(key: str) -> dict[str, Any] | None:
    """Return a dict with env/config/code default/effective for a key.

    Precedence: environment SECUREDELETE_<KEY> > config file > code default.
    Invalid env or config values are skipped. Returns None if key is not
    allowed.
    """
    if key not in _ALLOWED_KEYS:
        return None
    _, code_default = _ALLOWED_KEYS[key]

    env = os.getenv(ENV_PREFIX + key.upper())
    cfg = load_config() or {}
    cfg_val = cfg.get(key)

    effective: Any = code_default
    for candidate in (env, cfg_val):
        if candidate is None:
            continue
        try:
            effective = validate_config_value(key, candidate)
            break
        except ValueError:
            continue

    return {'env': env, 'config': cfg_val, 'code_default': code_default, 'effective': effective}


def _effective(key: str) -> Any:
    eff = get_effective_value(key)
    assert eff is not None
    return eff['effective']


def load_policy() -> DeletePolicy:
    """Build the DeletePolicy for this process from env, config and defaults."""
    return DeletePolicy(
        required_code=_effective('required_code'),
        high_risk_categories=frozenset(_effective('high_risk_categories')),
        threshold_count=_effective('threshold_count'),
        grace_duration=timedelta(minutes=_effective('grace_minutes')),
        notify_dropped=_effective('notify_dropped'),
    )
