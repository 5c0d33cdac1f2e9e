"""Tests for the YAML dumper and prefix stripping."""
import io
from unittest import mock

import pytest
import yaml

from aws_secrets_dumper.secrets.domains.errors import DumpError
from aws_secrets_dumper.secrets.domains.models import Secret, strip_prefix
from aws_secrets_dumper.secrets.workflows.dumper import Dumper, build_document


@pytest.fixture
def app_secrets():
    return [
        Secret(key="/app/db_password", value="secret1", description="db pw"),
        Secret(key="/app/api_key", value="secret2", description=""),
    ]


def dump_to_dict(secrets, prefix_to_remove=""):
    out = io.StringIO()
    Dumper(out, prefix_to_remove=prefix_to_remove).dump(secrets)
    return yaml.safe_load(out.getvalue()), out.getvalue()


class TestStripPrefix:
    """Test suite for strip_prefix."""

    @pytest.mark.parametrize("key,prefix,expected", [
        ("/app/db", "/app/", "db"),
        ("/app/app/db", "/app/", "app/db"),
        ("/other/db", "/app/", "/other/db"),
        ("/other/app/db", "/app/", "/other/app/db"),
        ("/app/", "/app/", ""),
        ("/app/db", "", "/app/db"),
        ("prod-db", "prod-", "db"),
    ])
    def test_strip_prefix(self, key, prefix, expected):
        assert strip_prefix(key, prefix) == expected


class TestBuildDocument:
    """Test suite for build_document."""

    def test_keeps_keys_without_prefix_removal(self, app_secrets):
        document = build_document(app_secrets)

        assert set(document) == {"/app/db_password", "/app/api_key"}

    def test_strips_prefix(self, app_secrets):
        document = build_document(app_secrets, "/app/")

        assert document == {
            "db_password": {"value": "secret1", "description": "db pw"},
            "api_key": {"value": "secret2", "description": ""},
        }

    def test_collision_is_last_write_wins(self):
        secrets = [
            Secret(key="/app/x", value="first"),
            Secret(key="x", value="second"),
        ]

        document = build_document(secrets, "/app/")

        assert document == {"x": {"value": "second", "description": ""}}

    def test_does_not_mutate_secrets(self, app_secrets):
        build_document(app_secrets, "/app/")

        assert app_secrets[0].key == "/app/db_password"


class TestDumper:
    """Test suite for Dumper."""

    def test_example_with_prefix_removal(self, app_secrets):
        data, _ = dump_to_dict(app_secrets, "/app/")

        assert data == {
            "db_password": {"value": "secret1", "description": "db pw"},
            "api_key": {"value": "secret2", "description": ""},
        }

    def test_without_prefix_removal(self, app_secrets):
        data, _ = dump_to_dict(app_secrets)

        assert set(data) == {"/app/db_password", "/app/api_key"}

    def test_output_is_block_style_mapping_of_mappings(self, app_secrets):
        _, text = dump_to_dict(app_secrets, "/app/")

        assert text == (
            "api_key:\n"
            "  description: ''\n"
            "  value: secret2\n"
            "db_password:\n"
            "  description: db pw\n"
            "  value: secret1\n"
        )

    def test_dumping_twice_is_identical(self, app_secrets):
        _, first = dump_to_dict(app_secrets, "/app/")
        _, second = dump_to_dict(app_secrets, "/app/")

        assert first == second

    def test_multiline_and_unicode_values_round_trip(self):
        secrets = [Secret(key="cert", value="-----BEGIN-----\nabc\n-----END-----\n", description="clé")]

        data, _ = dump_to_dict(secrets)

        assert data["cert"]["value"] == "-----BEGIN-----\nabc\n-----END-----\n"
        assert data["cert"]["description"] == "clé"

    def test_empty_list_dumps_empty_mapping(self):
        data, text = dump_to_dict([])

        assert data == {}
        assert text == "{}\n"

    def test_yaml_error_is_wrapped(self, app_secrets):
        with mock.patch(
            "aws_secrets_dumper.secrets.workflows.dumper.yaml.safe_dump",
            side_effect=yaml.representer.RepresenterError("cannot represent"),
        ):
            with pytest.raises(DumpError, match="failed to encode secrets"):
                Dumper(io.StringIO()).dump(app_secrets)
