"""
Audit configuration loader.

Loads AuditConfig from a YAML file. Keys may be snake_case or camelCase:

    output: report.json
    validation: true
    tier: pro
    verbose: false
    context: "Internal build tool, expects Node 20"
"""

from pathlib import Path
from typing import Any, Dict

import yaml

from uxaudit.audit.domain.models import AuditConfig
from uxaudit.shared.domain.base_model import to_snake_case
from uxaudit.shared.domain.exceptions import ConfigurationError

_FIELD_TYPES: Dict[str, tuple[type, ...]] = {
    "output": (str,),
    "validation": (bool,),
    "tier": (str,),
    "verbose": (bool,),
    "context": (str, type(None)),
}


def load_audit_config(config_path: Path, **overrides: Any) -> AuditConfig:
    """
    Load audit configuration from YAML file.

    Args:
        config_path: Path to the YAML file
        **overrides: Values that win over the file (e.g. CLI flags); None is ignored

    Returns:
        AuditConfig

    Raises:
        ConfigurationError: If the file is missing, not valid YAML, or has bad values
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise ConfigurationError(f"Config file not found: {config_path}", {"path": str(config_path)})

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}", {"path": str(config_path)}) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root must be a mapping: {config_path}", {"path": str(config_path)})

    values: Dict[str, Any] = {}
    for key, value in data.items():
        name = to_snake_case(str(key))
        if name not in _FIELD_TYPES:
            raise ConfigurationError(f"Unknown config key: {key}", {"path": str(config_path)})
        if not isinstance(value, _FIELD_TYPES[name]):
            raise ConfigurationError(
                f"Invalid value for {key}: expected {_FIELD_TYPES[name][0].__name__}",
                {"path": str(config_path), "key": key},
            )
        values[name] = value

    values.update({k: v for k, v in overrides.items() if v is not None})
    return AuditConfig(**values)
