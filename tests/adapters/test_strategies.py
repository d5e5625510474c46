"""Layout recognition tests for the three layered parsing strategies."""

from __future__ import annotations

from pathlib import Path

import pytest

from lib_layered_bindings.adapters.strategies.data import DataParsingStrategy
from lib_layered_bindings.adapters.strategies.secret_key import SecretKeyParsingStrategy
from lib_layered_bindings.adapters.strategies.secret_root_key import SecretRootKeyParsingStrategy
from lib_layered_bindings.domain.errors import ValueCastError
from tests.support import BindingSandbox, create_binding_sandbox


@pytest.fixture()
def sandbox(tmp_path: Path) -> BindingSandbox:
    return create_binding_sandbox(tmp_path)


def test_secret_key_properties_equal_file_mapping(sandbox: BindingSandbox) -> None:
    files = {"clientid": "abc", "clientsecret": "s3cr3t", "url": "https://uaa"}
    path = sandbox.write_secret_keys("xsuaa", "my-xsuaa", files)

    binding = SecretKeyParsingStrategy().parse("xsuaa", "my-xsuaa", path)

    assert binding is not None
    assert binding.properties.as_dict() == files
    assert binding.credentials.as_dict() == files
    assert (binding.name, binding.service_name, binding.strategy) == ("my-xsuaa", "xsuaa", "secret_key")


def test_secret_key_lifts_metadata(sandbox: BindingSandbox) -> None:
    path = sandbox.write_secret_keys("hana", "db", {"plan": "hdi-shared", "tags": '["hana", "db"]', "host": "h"})

    binding = SecretKeyParsingStrategy().parse("hana", "db", path)

    assert binding is not None
    assert binding.service_plan == "hdi-shared"
    assert binding.tags == ("hana", "db")
    assert binding.credentials.get_keys() == {"host"}
    assert binding.properties.get_string("tags") == '["hana", "db"]'


def test_secret_key_ignores_hidden_entries_and_subdirectories(sandbox: BindingSandbox) -> None:
    path = sandbox.write_secret_keys("svc", "b", {"url": "u"})
    (path / "..data").mkdir()
    (path / ".hidden").write_text("x", encoding="utf-8")
    (path / "nested").mkdir()

    binding = SecretKeyParsingStrategy().parse("svc", "b", path)

    assert binding is not None
    assert binding.get_keys() == {"url"}


def test_secret_key_not_applicable_for_empty_directory(sandbox: BindingSandbox) -> None:
    path = sandbox.binding_dir("svc", "empty")
    assert SecretKeyParsingStrategy().parse("svc", "empty", path) is None


def test_secret_key_not_applicable_for_undecodable_file(sandbox: BindingSandbox) -> None:
    sandbox.write_raw("svc", "b", "key", b"\xff\xfe\xfa")
    assert SecretKeyParsingStrategy().parse("svc", "b", sandbox.root / "svc" / "b") is None


def test_secret_key_missing_directory_raises_os_error(sandbox: BindingSandbox) -> None:
    with pytest.raises(OSError):
        SecretKeyParsingStrategy().parse("svc", "gone", sandbox.root / "svc" / "gone")


def test_secret_root_key_parses_single_document(sandbox: BindingSandbox) -> None:
    document = {"clientid": "abc", "plan": "broker", "tags": ["xsuaa"], "uaa": {"url": "https://uaa"}}
    path = sandbox.write_root_key("xsuaa", "my-xsuaa", document)

    binding = SecretRootKeyParsingStrategy().parse("xsuaa", "my-xsuaa", path)

    assert binding is not None
    assert binding.strategy == "secret_root_key"
    assert binding.service_plan == "broker"
    assert binding.tags == ("xsuaa",)
    assert binding.credentials.get_keys() == {"clientid", "uaa"}
    assert binding.credentials.get_map_view("uaa").get_string("url") == "https://uaa"
    assert binding.properties.as_dict() == document


def test_secret_root_key_requires_exactly_one_file(sandbox: BindingSandbox) -> None:
    path = sandbox.write_secret_keys("svc", "b", {"a": "{}", "b": "{}"})
    assert SecretRootKeyParsingStrategy().parse("svc", "b", path) is None


def test_secret_root_key_requires_json_object(sandbox: BindingSandbox) -> None:
    path = sandbox.write_secret_keys("svc", "b", {"uri": "postgres://demo"})
    assert SecretRootKeyParsingStrategy().parse("svc", "b", path) is None

    sandbox.write_secret_keys("svc", "list", {"doc": "[1, 2]"})
    assert SecretRootKeyParsingStrategy().parse("svc", "list", sandbox.root / "svc" / "list") is None


def test_secret_root_key_honours_root_key_name(sandbox: BindingSandbox) -> None:
    path = sandbox.write_root_key("svc", "b", {"url": "u"}, key="binding")

    assert SecretRootKeyParsingStrategy(root_key="other").parse("svc", "b", path) is None
    assert SecretRootKeyParsingStrategy(root_key="binding").parse("svc", "b", path) is not None


@pytest.mark.parametrize(
    ("file_name", "content"),
    [
        ("data.json", '{"metadata": {"plan": "standard", "tags": ["s3"]}, "credentials": {"bucket": "b", "port": 443}}'),
        ("data.yaml", "metadata:\n  plan: standard\n  tags: [s3]\ncredentials:\n  bucket: b\n  port: 443\n"),
        ("data.toml", '[metadata]\nplan = "standard"\ntags = ["s3"]\n[credentials]\nbucket = "b"\nport = 443\n'),
    ],
)
def test_data_strategy_formats(sandbox: BindingSandbox, file_name: str, content: str) -> None:
    sandbox.write_raw("objectstore", "bucket", file_name, content)

    binding = DataParsingStrategy().parse("objectstore", "bucket", sandbox.root / "objectstore" / "bucket")

    assert binding is not None
    assert binding.strategy == "data"
    assert binding.service_plan == "standard"
    assert binding.tags == ("s3",)
    assert binding.credentials.get_string("bucket") == "b"
    assert binding.credentials.get_integer("port") == 443
    assert binding.properties.get_keys() == {"metadata", "credentials"}


def test_data_strategy_reads_top_level_metadata(sandbox: BindingSandbox) -> None:
    path = sandbox.write_data("svc", "b", {"plan": "lite", "credentials": {"url": "u"}})

    binding = DataParsingStrategy().parse("svc", "b", path)

    assert binding is not None
    assert binding.service_plan == "lite"
    assert binding.tags == ()


def test_data_strategy_prefers_first_file_name(sandbox: BindingSandbox) -> None:
    sandbox.write_raw("svc", "b", "data.json", '{"credentials": {"source": "json"}}')
    sandbox.write_raw("svc", "b", "data.yaml", "credentials:\n  source: yaml\n")
    path = sandbox.root / "svc" / "b"

    assert DataParsingStrategy().parse("svc", "b", path).credentials.get_string("source") == "json"
    yaml_first = DataParsingStrategy(file_names=("data.yaml", "data.json"))
    assert yaml_first.parse("svc", "b", path).credentials.get_string("source") == "yaml"


@pytest.mark.parametrize(
    "content",
    ['{"credentials": "flat"}', '{"metadata": {}}', "{broken", "[]"],
)
def test_data_strategy_not_applicable(sandbox: BindingSandbox, content: str) -> None:
    sandbox.write_raw("svc", "b", "data.json", content)
    assert DataParsingStrategy().parse("svc", "b", sandbox.root / "svc" / "b") is None


def test_data_strategy_without_document(sandbox: BindingSandbox) -> None:
    path = sandbox.write_secret_keys("svc", "b", {"url": "u"})
    assert DataParsingStrategy().parse("svc", "b", path) is None


def test_data_strategy_rejects_unknown_suffix() -> None:
    with pytest.raises(ValueError):
        DataParsingStrategy(file_names=("data.ini",))


def test_data_strategy_uses_configured_encoding(sandbox: BindingSandbox) -> None:
    document = '{"credentials": {"city": "Zürich"}}'.encode("latin-1")
    path = sandbox.write_raw("svc", "b", "data.json", document).parent

    assert DataParsingStrategy().parse("svc", "b", path) is None
    binding = DataParsingStrategy(encoding="latin-1").parse("svc", "b", path)
    assert binding.credentials.get_string("city") == "Zürich"


def test_data_strategy_keeps_huge_integers_as_numbers(sandbox: BindingSandbox) -> None:
    huge = "1" + "0" * 400
    path = sandbox.write_raw("svc", "b", "data.json", '{"credentials": {"n": %s}}' % huge).parent

    credentials = DataParsingStrategy().parse("svc", "b", path).credentials

    assert credentials.get_number("n") == int(huge)
    with pytest.raises(ValueCastError):
        credentials.get_double("n")
