import pydantic
import pytest

from ingestor.config import (
    ConfigError,
    StatusConfig,
    StatusSource,
    load_config_from_env,
    parse_options,
    validate_config,
)


def test_defaults():
    config, sources = parse_options([])
    assert config == StatusConfig(
        collect_compression=True,
        improved_naming_schema=False,
        collect_user_count=False,
        collect_individual_users=True,
    )
    assert sources == []


def test_config_is_immutable():
    config = StatusConfig()
    with pytest.raises(pydantic.ValidationError):
        config.collect_user_count = True


def test_keys_are_case_insensitive_and_alias():
    config, _ = parse_options(
        [
            ("compression", "false"),
            ("IMPROVEDNAMINGSCHEMA", "yes"),
            ("CollectUserCount", "on"),
            ("collectindividualusers", "off"),
        ]
    )
    assert config.collect_compression is False
    assert config.improved_naming_schema is True
    assert config.collect_user_count is True
    assert config.collect_individual_users is False


def test_boolean_words_follow_defaults():
    # default-true flags only turn off on an explicit false word and vice versa
    config, _ = parse_options(
        [("CollectCompression", "maybe"), ("CollectUserCount", "maybe")]
    )
    assert config.collect_compression is True
    assert config.collect_user_count is False


def test_status_file_names():
    _, sources = parse_options(
        [("StatusFile", "/var/run/openvpn/server.status"), ("StatusFile", "client.status")]
    )
    assert sources == [
        StatusSource("/var/run/openvpn/server.status", "server.status"),
        StatusSource("client.status", "client.status"),
    ]


def test_duplicate_status_file_name():
    with pytest.raises(ConfigError):
        parse_options([("StatusFile", "/a/server.status"), ("StatusFile", "/b/server.status")])


def test_unknown_option():
    with pytest.raises(ConfigError):
        parse_options([("Interval", "10")])


def test_nothing_to_collect():
    config = StatusConfig(collect_compression=False, collect_individual_users=False)
    with pytest.raises(ConfigError):
        validate_config(config)
    validate_config(StatusConfig())


def test_load_from_env():
    config, sources = load_config_from_env(
        {
            "OPENVPN_STATUS_FILES": "/run/a.status, /run/b.status",
            "OPENVPN_IMPROVED_NAMING_SCHEMA": "true",
            "OPENVPN_COLLECT_USER_COUNT": "true",
        }
    )
    assert [s.name for s in sources] == ["a.status", "b.status"]
    assert config.improved_naming_schema is True
    assert config.collect_user_count is True
    assert config.collect_compression is True


def test_load_from_env_rejects_empty_collection():
    with pytest.raises(ConfigError):
        load_config_from_env(
            {
                "OPENVPN_COLLECT_COMPRESSION": "false",
                "OPENVPN_COLLECT_INDIVIDUAL_USERS": "false",
            }
        )
