"""
Configuration for the OpenVPN status collector.

Settings are built once at startup and are immutable afterwards; every read
cycle receives the same `StatusConfig` instance. Options use the collectd
plugin vocabulary so existing configurations carry over unchanged:

    StatusFile             /var/run/openvpn/server.status   (repeatable)
    CollectCompression     true    (alias: Compression, deprecated)
    ImprovedNamingSchema   false
    CollectUserCount       false
    CollectIndividualUsers true
"""

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

TRUE_WORDS = {"true", "yes", "on"}
FALSE_WORDS = {"false", "no", "off"}


class ConfigError(ValueError):
    """Invalid or conflicting collector configuration."""


class StatusConfig(BaseModel):
    """Feature flags shared by all read cycles."""

    model_config = ConfigDict(frozen=True)

    collect_compression: bool = True
    improved_naming_schema: bool = False
    collect_user_count: bool = False
    collect_individual_users: bool = True


@dataclass(frozen=True)
class StatusSource:
    """One monitored status file."""

    path: str
    name: str

    @classmethod
    def from_path(cls, path: str) -> "StatusSource":
        # Instance name is everything after the last '/'
        return cls(path=path, name=path.rsplit("/", 1)[-1])


def is_true(value: str) -> bool:
    return value.strip().lower() in TRUE_WORDS


def is_false(value: str) -> bool:
    return value.strip().lower() in FALSE_WORDS


def parse_options(
    pairs: Iterable[tuple[str, str]],
) -> tuple[StatusConfig, list[StatusSource]]:
    """
    Turn (key, value) option pairs into a config and the list of sources.

    Keys are case-insensitive. Raises ConfigError on unknown keys and on two
    status files sharing the same base name.
    """
    flags: dict[str, bool] = {}
    sources: list[StatusSource] = []
    seen: set[str] = set()

    for key, value in pairs:
        k = key.strip().lower()
        if k == "statusfile":
            source = StatusSource.from_path(value.strip())
            if source.name in seen:
                raise ConfigError(
                    f'status filename "{source.name}" already used, '
                    "please choose a different one"
                )
            seen.add(source.name)
            sources.append(source)
            logger.debug("status file %r added", source.path)
        elif k in ("collectcompression", "compression"):
            flags["collect_compression"] = not is_false(value)
        elif k == "improvednamingschema":
            flags["improved_naming_schema"] = is_true(value)
            if flags["improved_naming_schema"]:
                logger.debug("using the improved naming schema")
        elif k == "collectusercount":
            flags["collect_user_count"] = is_true(value)
        elif k == "collectindividualusers":
            flags["collect_individual_users"] = not is_false(value)
        else:
            raise ConfigError(f"unknown option: {key}")

    return StatusConfig(**flags), sources


def validate_config(config: StatusConfig) -> None:
    """Reject a configuration that would never produce a sample."""
    if not (
        config.collect_individual_users
        or config.collect_compression
        or config.collect_user_count
    ):
        raise ConfigError(
            "Neither CollectIndividualUsers, CollectCompression, nor "
            "CollectUserCount is true. There's no data left to collect."
        )


ENV_OPTIONS = {
    "OPENVPN_COLLECT_COMPRESSION": "CollectCompression",
    "OPENVPN_IMPROVED_NAMING_SCHEMA": "ImprovedNamingSchema",
    "OPENVPN_COLLECT_USER_COUNT": "CollectUserCount",
    "OPENVPN_COLLECT_INDIVIDUAL_USERS": "CollectIndividualUsers",
}


def load_config_from_env(
    environ: dict[str, str] | None = None,
) -> tuple[StatusConfig, list[StatusSource]]:
    """
    Build the configuration from environment variables.

    OPENVPN_STATUS_FILES holds one or more paths separated by os.pathsep or
    commas; the flag variables take the same words as the option values.
    """
    env = os.environ if environ is None else environ
    pairs: list[tuple[str, str]] = []

    files = env.get("OPENVPN_STATUS_FILES", "")
    for path in files.replace(os.pathsep, ",").split(","):
        if path.strip():
            pairs.append(("StatusFile", path.strip()))

    for var, option in ENV_OPTIONS.items():
        value = env.get(var)
        if value is not None:
            pairs.append((option, value))

    config, sources = parse_options(pairs)
    validate_config(config)
    return config, sources
