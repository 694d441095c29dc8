"""Configuration file and environment loading for deployer commands"""

from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml
from dotenv import load_dotenv

from deployer.constants import DEFAULT_ENV_FILE, ENV_PREFIX
from deployer.exceptions import ConfigurationError

# Config file keys that name a repeatable option differently
KEY_ALIASES = {
    "merge_dir": "merge_dirs",
}


def envvar_for(param_name: str) -> str:
    """Environment variable read for an option, e.g. DEPLOYER_PULL_TAG."""
    return f"{ENV_PREFIX}_{param_name.upper()}"


def normalize_key(key: str) -> str:
    key = str(key).strip().lstrip("-").replace("-", "_")
    return KEY_ALIASES.get(key, key)


def load_config_file(
    path: Path, known_keys: Optional[Iterable[str]] = None
) -> Dict[str, Any]:
    """
    Load option defaults from a YAML file.

    Keys are option names, with dashes or underscores:

        git-repo-internal: git@example.com:ops/deploy.git
        pull_tag: pull
        merge-dir: [group_vars, inventories]

    Args:
        path: YAML file to read
        known_keys: Accepted option names; anything else is rejected

    Returns:
        Mapping of option name to value

    Raises:
        ConfigurationError: If the file is unreadable, not a mapping, or
            names an unknown option
    """
    try:
        raw = yaml.safe_load(Path(path).read_text())
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}", context=str(e))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}", context=str(e))

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping of option names to values"
        )

    values = {normalize_key(key): value for key, value in raw.items()}

    if "merge_dirs" in values and isinstance(values["merge_dirs"], str):
        values["merge_dirs"] = [values["merge_dirs"]]

    if known_keys is not None:
        unknown = sorted(set(values) - set(known_keys))
        if unknown:
            raise ConfigurationError(
                f"Unknown option(s) in {path}: {', '.join(unknown)}",
                context=f"Accepted: {', '.join(sorted(known_keys))}",
            )

    # Values stay strings the way they would arrive from the command line
    return {
        key: value if isinstance(value, (list, tuple)) or value is None else str(value)
        for key, value in values.items()
    }


def load_env_file(path: Optional[Path] = None) -> Optional[Path]:
    """
    Load a dotenv file into the process environment.

    Variables already set in the environment win over the file. With no
    path, ``.env`` in the current directory is used when it exists.

    Returns:
        The file that was loaded, or None
    """
    if path is None:
        path = Path(DEFAULT_ENV_FILE)
        if not path.is_file():
            return None
    elif not Path(path).is_file():
        raise ConfigurationError(f"Env file not found: {path}")

    load_dotenv(path, override=False)
    return Path(path)

