"""Configuration loading, merging, and interactive creation."""

from __future__ import annotations

import logging
import os
import pathlib
import tomllib


logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.toml"

_DEFAULTS: dict[str, object] = {
    "algorithm": "md5",
    "workers": 10,
    "output": "list.txt",
    "exclude_dir": [],
    "progress": True,
}

_INT_KEYS = {"workers"}
_BOOL_KEYS = {"progress"}
_LIST_KEYS = {"exclude_dir"}


def _config_dir() -> pathlib.Path:
    """Return the dupclean config directory."""
    base = pathlib.Path(os.environ.get("XDG_CONFIG_HOME", "~/.config")).expanduser()
    return base / "dupclean"


def load_config(config_dir: pathlib.Path | None = None) -> dict:
    """Load config.toml and return its contents as a dict.

    Returns {} if no file exists or it cannot be parsed.
    """
    if config_dir is None:
        config_dir = _config_dir()
    path = config_dir / CONFIG_FILENAME
    if not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring unreadable config {path}: {e}")
        return {}


def merge_config_into_args(args, config: dict) -> None:
    """Three-layer merge: CLI > config > hardcoded defaults.

    Mutates *args* in place. Keys the parsed subcommand does not define are
    still set, so later code can rely on every setting being present.
    """
    # algorithm: any string is accepted, unknown names fall back later
    if getattr(args, "algorithm", None) is None:
        cfg_val = config.get("algorithm")
        args.algorithm = str(cfg_val) if cfg_val is not None else _DEFAULTS["algorithm"]

    for key in _INT_KEYS:
        if getattr(args, key, None) is not None:
            continue
        cfg_val = config.get(key)
        if isinstance(cfg_val, int) and not isinstance(cfg_val, bool):
            setattr(args, key, cfg_val)
        else:
            setattr(args, key, _DEFAULTS[key])

    for key in _BOOL_KEYS:
        if getattr(args, key, None) is not None:
            continue
        cfg_val = config.get(key)
        setattr(args, key, bool(cfg_val) if cfg_val is not None else _DEFAULTS[key])

    if getattr(args, "output", None) is None:
        cfg_val = config.get("output")
        args.output = pathlib.Path(str(cfg_val or _DEFAULTS["output"])).expanduser()

    # List fields: merge CLI + config
    for key in _LIST_KEYS:
        cli_val = getattr(args, key, None) or []
        cfg_val = config.get(key) or []
        if isinstance(cfg_val, str):
            cfg_val = [cfg_val]
        setattr(args, key, cli_val + [v for v in cfg_val if v not in cli_val])


def create_config_interactive(
    config_dir: pathlib.Path | None = None,
    input_fn=input,
    print_fn=print,
) -> pathlib.Path:
    """Interactively create or update config.toml.

    Returns the path to the written config file.
    """
    if config_dir is None:
        config_dir = _config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    existing = load_config(config_dir)

    settings: list[tuple[str, str]] = [
        ("algorithm", "Digest algorithm (md5/sha1/sha256/sha512)"),
        ("workers", "Files hashed concurrently"),
        ("output", "List file written by 'list'"),
        ("exclude_dir", "Extra directories to skip (comma-separated globs)"),
        ("progress", "Show progress bars (true/false)"),
    ]

    result: dict[str, object] = {}

    for key, label in settings:
        default = existing.get(key, _DEFAULTS[key])
        if isinstance(default, list):
            shown = ", ".join(default)
        elif isinstance(default, bool):
            shown = str(default).lower()
        else:
            shown = str(default)
        value = input_fn(f"  {label} [{shown}]: ").strip()
        if not value:
            value = shown

        if key in _BOOL_KEYS:
            result[key] = value.lower() in ("true", "1", "yes")
        elif key in _INT_KEYS:
            try:
                result[key] = int(value)
            except ValueError:
                print_fn(f"  Not a number: {value!r}, keeping {_DEFAULTS[key]}")
                result[key] = _DEFAULTS[key]
        elif key in _LIST_KEYS:
            result[key] = [v.strip() for v in value.split(",") if v.strip()]
        else:
            result[key] = value

    # Drop empty lists to keep config clean
    for key in _LIST_KEYS:
        if not result.get(key):
            result.pop(key, None)

    path = config_dir / CONFIG_FILENAME
    path.write_text(_to_toml(result), encoding="utf-8")
    print_fn(f"Configuration saved to {path}")
    return path


def _to_toml(data: dict) -> str:
    """Serialize a flat dict to TOML format."""
    lines: list[str] = []
    for key, value in data.items():
        if isinstance(value, bool):
            lines.append(f"{key} = {str(value).lower()}")
        elif isinstance(value, list):
            items = ", ".join(_quote(v) for v in value)
            lines.append(f"{key} = [{items}]")
        elif isinstance(value, str):
            lines.append(f"{key} = {_quote(value)}")
        elif value is None:
            continue
        else:
            lines.append(f"{key} = {value}")
    return "\n".join(lines) + "\n" if lines else ""


def _quote(value: str) -> str:
    """Quote a TOML basic string."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
