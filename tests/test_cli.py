"""Tests for imgapi CLI."""

from __future__ import annotations

import json
from unittest.mock import patch
from uuid import UUID

import pytest
import requests
from click.testing import CliRunner

from conftest import BASE_URL, IMAGE_UUID, OWNER_UUID, make_manifest, make_response
from imgapi.cli import main, parse_filter_args
from imgapi.errors import ValidationError
from imgapi.models import ImageState, OperatingSystem


def _invoke(args: list[str], payload=None, status_code: int = 200):
    """Run the CLI against a patched ``requests.Session``."""
    runner = CliRunner()
    with patch("imgapi.core.requests.Session") as session_cls:
        session = session_cls.return_value
        session.get.return_value = make_response(payload, status_code)
        result = runner.invoke(main, ["--url", BASE_URL, *args])
    return result, session


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------


class TestVersionFlag:
    def test_version_exits_zero(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


# ---------------------------------------------------------------------------
# parse_filter_args
# ---------------------------------------------------------------------------


class TestParseFilterArgs:
    def test_no_tokens_gives_empty_filter(self) -> None:
        f = parse_filter_args(())
        assert f.model_dump(exclude_none=True) == {}

    def test_all_supported_keys(self) -> None:
        f = parse_filter_args(
            (
                f"account={OWNER_UUID}",
                "channel=dev",
                "inclAdminFields=true",
                f"owner={IMAGE_UUID}",
                "state=failed",
                "name=~base",
                "version=1.0",
                "public=false",
                "os=Linux",
                "type=!docker",
                "billing_tag=a",
                "billing_tag=b",
                "limit=10",
            )
        )
        assert f.account == UUID(OWNER_UUID)
        assert f.channel == "dev"
        assert f.include_admin_fields is True
        assert f.owner == UUID(IMAGE_UUID)
        assert f.state is ImageState.FAILED
        assert f.name == "~base"
        assert f.version == "1.0"
        assert f.public is False
        assert f.os is OperatingSystem.LINUX
        assert f.image_type == "!docker"
        assert f.billing_tag == ["a", "b"]
        assert f.limit == 10

    def test_value_may_contain_equals(self) -> None:
        assert parse_filter_args(("name=a=b",)).name == "a=b"

    @pytest.mark.parametrize(
        ("token", "message"),
        [
            ("account=nope", "account must be a valid UUID"),
            ("owner=1", "owner must be a valid UUID"),
            ("public=yes", "public must be either true or false"),
            ("inclAdminFields=1", "inclAdminFields must be either true or false"),
            ("os=beos", "os must be one of"),
            ("limit=ten", "limit must be a non-negative integer"),
            ("limit=-3", "limit must be a non-negative integer"),
            ("limit=+5", "limit must be a non-negative integer"),
            ("limit= 5", "limit must be a non-negative integer"),
            ("limit=1_0", "limit must be a non-negative integer"),
            ("limit=", "limit must be a non-negative integer"),
            ("colour=blue", "unexpected query filter: colour=blue"),
            ("tag=cloud", "not supported yet"),
            ("marker=abc", "not supported yet"),
            ("linux", "expected key=value"),
        ],
    )
    def test_rejected_tokens(self, token: str, message: str) -> None:
        with pytest.raises(ValidationError, match=message):
            parse_filter_args((token,))


# ---------------------------------------------------------------------------
# list command
# ---------------------------------------------------------------------------


class TestListCommand:
    def test_list_reports_count(self) -> None:
        result, session = _invoke(["list", "os=smartos"], [make_manifest()])
        assert result.exit_code == 0, result.output
        assert "found 1 image(s) matching filter" in result.output
        assert "base64" in result.output
        assert session.get.call_args.args[0] == f"{BASE_URL}?os=smartos"

    def test_list_without_filters(self) -> None:
        result, session = _invoke(["list"], [])
        assert result.exit_code == 0
        assert "found 0 image(s)" in result.output
        assert session.get.call_args.args[0] == BASE_URL
        session.close.assert_called_once()

    def test_list_json_output(self) -> None:
        result, _ = _invoke(["list", "--json"], [make_manifest()])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data[0]["uuid"] == IMAGE_UUID
        assert data[0]["type"] == "zone-dataset"
        assert "stor" not in data[0]["files"][0]

    def test_list_bad_filter_sends_nothing(self) -> None:
        result, session = _invoke(["list", "colour=blue"], [])
        assert result.exit_code != 0
        assert "unexpected query filter" in result.output
        session.get.assert_not_called()

    def test_list_transport_failure(self) -> None:
        runner = CliRunner()
        with patch("imgapi.core.requests.Session") as session_cls:
            session_cls.return_value.get.side_effect = requests.ConnectionError(
                "boom"
            )
            result = runner.invoke(main, ["--url", BASE_URL, "list"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_bad_base_url_fails(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--url", "not a url", "list"])
        assert result.exit_code == 1
        assert "Malformed URL" in result.output


# ---------------------------------------------------------------------------
# get command
# ---------------------------------------------------------------------------


class TestGetCommand:
    def test_get_shows_image(self) -> None:
        result, session = _invoke(["get", IMAGE_UUID], make_manifest())
        assert result.exit_code == 0, result.output
        assert IMAGE_UUID in result.output
        assert "13.4.0" in result.output
        assert "active" in result.output
        assert session.get.call_args.args[0] == f"{BASE_URL}/{IMAGE_UUID}"
        session.close.assert_called_once()

    def test_get_failed_image_shows_error(self) -> None:
        manifest = make_manifest(state="failed", error={"message": "no origin"})
        result, _ = _invoke(["get", IMAGE_UUID], manifest)
        assert result.exit_code == 0
        assert "no origin" in result.output

    def test_get_json_output(self) -> None:
        result, _ = _invoke(["get", "--json", IMAGE_UUID], make_manifest())
        assert result.exit_code == 0
        assert json.loads(result.output)["name"] == "base64"

    def test_get_invalid_uuid(self) -> None:
        result, session = _invoke(["get", "not-a-uuid"], make_manifest())
        assert result.exit_code == 1
        assert "not a valid image UUID" in result.output
        session.get.assert_not_called()

    def test_get_not_found(self) -> None:
        result, _ = _invoke(
            ["get", IMAGE_UUID], {"code": "ResourceNotFound"}, status_code=404
        )
        assert result.exit_code == 1
        assert "404" in result.output
