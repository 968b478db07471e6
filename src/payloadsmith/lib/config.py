"""
Configuration management for payloadsmith.

This module defines the `Config` singleton class, which loads settings from
a CFG file, applies type conversions, and exposes a `get` method for
retrieving values at runtime. The free-form `[texts]` and `[bins]` sections
seed the named variable stores used by the `text` and `bin` instructions.
"""

import configparser
import os
from pathlib import Path
from typing import Any, ClassVar

from payloadsmith.lib.logger import Logger


class Config:
    """Singleton class to load and store configuration settings."""

    _data: ClassVar[dict[str, dict[str, Any]] | None] = None
    _defaults: ClassVar[dict[str, dict[str, Any]]] = {
        "serial": {"path": "/dev/ttyUSB0", "baud": 115200},
        "compose": {"seed": None},
        "dev": {
            "stack_trace_errors": False,
            "log_level": "info",
            "disable_serial": False,
        },
    }

    # Sections copied verbatim, keys are variable names
    _VARIABLE_SECTIONS = ("texts", "bins")

    # Special post-load normalizers for keys that need custom casting
    _NORMALIZERS = {
        ("dev", "log_level"): "_str_to_level",
        ("compose", "seed"): "_str_to_seed",
    }

    @classmethod
    def _resolve_config_path(cls) -> str | None:
        """Return a usable payloadsmith.cfg path (env > repo > /etc) or None."""

        env = os.getenv("PAYLOADSMITH_CONFIG")
        if env and Path(env).exists():
            return env

        dev = Path(__file__).resolve().parents[3] / "config" / "payloadsmith.cfg"
        if dev.exists():
            return str(dev)

        p = Path("/etc/payloadsmith.cfg")
        if p.exists():
            return str(p)

        return None

    @classmethod
    def _with_defaults(cls) -> dict[str, dict[str, Any]]:
        data = {s: dict(v) for s, v in cls._defaults.items()}
        for section in cls._VARIABLE_SECTIONS:
            data[section] = {}
        return data

    @classmethod
    def _apply_normalizers(cls, data: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
        """Apply custom normalizers."""

        out = {s: dict(v) for s, v in data.items()}

        for (section, key), func in cls._NORMALIZERS.items():
            if isinstance(func, str):
                func = getattr(cls, func)
            if section in out and key in out[section]:
                out[section][key] = func(out[section][key])

        return out

    @classmethod
    def _str_to_level(cls, level: str | int) -> int:
        """Convert a log level name to its numeric value."""

        if isinstance(level, int):
            return level

        levels = {
            "success": Logger.SUCCESS,
            "info": Logger.INFO,
            "warning": Logger.WARNING,
            "error": Logger.ERROR,
            "debug": Logger.DEBUG,
        }

        if level not in levels:
            raise ValueError(f"The level {level} not a valid log level.")

        return levels[level]

    @classmethod
    def _str_to_seed(cls, seed: str | int | None) -> int | None:
        """Convert a seed (decimal or 0x-prefixed) to an int, or None when unset."""

        if seed is None or isinstance(seed, int):
            return seed

        try:
            return int(seed, 0)
        except ValueError:
            raise ValueError(f"The seed {seed} is not a valid integer.") from None

    @staticmethod
    def _coerce(default_value: Any, raw: str) -> Any:
        """Coerce a string 'raw' into the type of 'default_value'."""

        if raw == "" and default_value is not None:
            return default_value
        if isinstance(default_value, bool):
            return raw.lower() in ("1", "true", "yes", "on")
        if isinstance(default_value, int):
            return int(raw)
        if default_value is None:
            return None if raw == "" else raw

        return raw

    @classmethod
    def load(cls, filepath: str | None = None) -> None:
        """
        Load the configuration from a file, falling back to defaults.

        Args:
            filepath (str): Path to the configuration file.
        """

        filepath = filepath or cls._resolve_config_path()

        if not filepath or not os.path.exists(filepath):
            Logger.warning("No config file found. Loading defaults...")
            cls._data = cls._apply_normalizers(cls._with_defaults())
            return

        if not filepath.endswith(".cfg"):
            Logger.warning("Config path does not end with .cfg. Loading defaults...")
            cls._data = cls._apply_normalizers(cls._with_defaults())
            return

        cp = configparser.ConfigParser(
            interpolation=None,
            inline_comment_prefixes=("#", ";"),
            strict=True,
        )
        # Variable names are case-sensitive
        cp.optionxform = str

        try:
            cp.read(filepath, encoding="utf-8")
        except configparser.MissingSectionHeaderError:
            Logger.warning("Invalid config file. Loading defaults...")
            cls._data = cls._apply_normalizers(cls._with_defaults())
            return

        data = cls._with_defaults()
        for section, defaults in cls._defaults.items():
            if cp.has_section(section):
                resolved = {}
                for key, dval in defaults.items():
                    if cp.has_option(section, key):
                        raw = cp.get(section, key, raw=True).strip()
                        resolved[key] = cls._coerce(dval, raw)
                    else:
                        resolved[key] = dval
                data[section] = resolved

        for section in cls._VARIABLE_SECTIONS:
            if cp.has_section(section):
                data[section] = {key: cp.get(section, key, raw=True) for key in cp.options(section)}

        cls._data = cls._apply_normalizers(data)

    @classmethod
    def get(cls, section: str, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value.

        Args:
            section (str): The section in the CFG file to retrieve.
            key (str): The key to retrieve.
            default: The default value if the key is not found.

        Returns:
            Any: The configuration value or the default value.
        """

        if cls._data is None:
            raise RuntimeError("Configuration is not loaded. Call `Config.load(filepath)` first.")

        if section not in cls._data:
            return default

        return cls._data[section].get(key, default)

    @classmethod
    def section(cls, section: str) -> dict[str, Any]:
        """
        Retrieve a copy of a whole configuration section.

        Args:
            section (str): The section to retrieve.

        Returns:
            dict[str, Any]: The section's values, empty if the section is unknown.
        """

        if cls._data is None:
            raise RuntimeError("Configuration is not loaded. Call `Config.load(filepath)` first.")

        return dict(cls._data.get(section, {}))
