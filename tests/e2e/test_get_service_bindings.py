"""End-to-end scans of layered binding trees through the public API."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

import pytest

from lib_layered_bindings import (
    LayeredServiceBindingAccessor,
    SecretKeyParsingStrategy,
    SecretRootKeyParsingStrategy,
    ServiceBinding,
    ServiceBindingAccessError,
    get_service_bindings,
)
from tests.support import BindingSandbox, create_binding_sandbox


@pytest.fixture()
def sandbox(tmp_path: Path) -> BindingSandbox:
    return create_binding_sandbox(tmp_path)


class RecordingStrategy:
    """Strategy double that records calls and returns a canned outcome."""

    def __init__(self, name: str, outcome: object = None) -> None:
        self.name = name
        self.outcome = outcome
        self.calls: list[tuple[str, str]] = []

    def parse(self, service_name: str, binding_name: str, binding_path: Path) -> ServiceBinding | None:
        self.calls.append((service_name, binding_name))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome  # type: ignore[return-value]


def test_single_secret_key_binding(sandbox: BindingSandbox) -> None:
    files = {"clientid": "abc", "url": "https://demo"}
    sandbox.write_secret_keys("xsuaa", "my-xsuaa", files)

    bindings = LayeredServiceBindingAccessor(sandbox.root).get_service_bindings()

    assert len(bindings) == 1
    assert bindings[0].properties.as_dict() == files
    assert (bindings[0].service_name, bindings[0].name) == ("xsuaa", "my-xsuaa")


def test_mixed_layouts_are_flattened(sandbox: BindingSandbox) -> None:
    sandbox.write_secret_keys("destination", "dest-1", {"uri": "https://d"})
    sandbox.write_root_key("xsuaa", "uaa-1", {"clientid": "a"})
    sandbox.write_root_key("xsuaa", "uaa-2", {"clientid": "b"})
    sandbox.write_data("objectstore", "os-1", {"credentials": {"bucket": "b"}})

    bindings = get_service_bindings(sandbox.root)

    assert sorted((b.service_name, b.name, b.strategy) for b in bindings) == [
        ("destination", "dest-1", "secret_key"),
        ("objectstore", "os-1", "data"),
        ("xsuaa", "uaa-1", "secret_root_key"),
        ("xsuaa", "uaa-2", "secret_root_key"),
    ]


def test_unmatched_binding_is_skipped_without_aborting(sandbox: BindingSandbox) -> None:
    sandbox.binding_dir("svc", "empty")
    sandbox.write_secret_keys("svc", "full", {"url": "u"})

    bindings = LayeredServiceBindingAccessor(sandbox.root).get_service_bindings()

    assert [binding.name for binding in bindings] == ["full"]


def test_files_at_root_and_service_level_are_ignored(sandbox: BindingSandbox) -> None:
    (sandbox.root / "README").write_text("not a service", encoding="utf-8")
    sandbox.write_secret_keys("svc", "b", {"url": "u"})
    (sandbox.root / "svc" / "stray-file").write_text("not a binding", encoding="utf-8")

    assert len(get_service_bindings(sandbox.root)) == 1


def test_missing_root_raises_access_error(tmp_path: Path) -> None:
    with pytest.raises(ServiceBindingAccessError) as info:
        LayeredServiceBindingAccessor(tmp_path / "missing").get_service_bindings()

    assert isinstance(info.value.__cause__, FileNotFoundError)


def test_root_that_is_a_file_raises_access_error(tmp_path: Path) -> None:
    root = tmp_path / "file"
    root.write_text("x", encoding="utf-8")

    with pytest.raises(ServiceBindingAccessError):
        get_service_bindings(root)


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="permissions are not enforced for root")
def test_unlistable_service_directory_aborts_scan(sandbox: BindingSandbox) -> None:
    sandbox.write_secret_keys("svc", "b", {"url": "u"})
    service_dir = sandbox.root / "svc"
    service_dir.chmod(0)
    try:
        with pytest.raises(ServiceBindingAccessError):
            get_service_bindings(sandbox.root)
    finally:
        service_dir.chmod(0o755)


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="permissions are not enforced for root")
def test_unreadable_binding_directory_is_skipped(sandbox: BindingSandbox) -> None:
    locked = sandbox.write_secret_keys("svc", "locked", {"url": "u"})
    sandbox.write_secret_keys("svc", "open", {"url": "u"})
    locked.chmod(0)
    try:
        bindings = get_service_bindings(sandbox.root)
    finally:
        locked.chmod(0o755)

    assert [binding.name for binding in bindings] == ["open"]


class DirectoryRemover:
    """Strategy double that deletes the binding directory before later strategies run."""

    name = "remover"

    def parse(self, service_name: str, binding_name: str, binding_path: Path) -> ServiceBinding | None:
        shutil.rmtree(binding_path)
        return None


def test_binding_removed_mid_scan_is_skipped_by_real_strategies(
    sandbox: BindingSandbox, caplog: pytest.LogCaptureFixture
) -> None:
    sandbox.write_secret_keys("svc", "vanishing", {"url": "u"})
    caplog.set_level(logging.DEBUG, logger="lib_layered_bindings")

    strategies = [DirectoryRemover(), SecretRootKeyParsingStrategy(), SecretKeyParsingStrategy()]
    bindings = LayeredServiceBindingAccessor(sandbox.root, strategies).get_service_bindings()

    assert bindings == []
    failures = [record.context for record in caplog.records if record.getMessage() == "strategy_failed"]
    assert [failure["strategy"] for failure in failures] == ["secret_root_key", "secret_key"]
    assert all(failure["error"] == "FileNotFoundError" for failure in failures)


def test_strategy_io_failure_falls_through_to_next_strategy(sandbox: BindingSandbox) -> None:
    sandbox.write_secret_keys("svc", "b", {"url": "u"})
    failing = RecordingStrategy("failing", PermissionError("denied"))

    bindings = LayeredServiceBindingAccessor(sandbox.root, [failing, SecretKeyParsingStrategy()]).get_service_bindings()

    assert failing.calls == [("svc", "b")]
    assert [binding.strategy for binding in bindings] == ["secret_key"]


def test_all_strategies_failing_skips_only_that_directory(sandbox: BindingSandbox) -> None:
    sandbox.write_secret_keys("svc", "a", {"url": "u"})
    sandbox.write_secret_keys("svc", "b", {"url": "u"})
    failing = RecordingStrategy("failing", OSError("io"))

    accessor = LayeredServiceBindingAccessor(sandbox.root, [failing])

    assert accessor.get_service_bindings() == []
    assert failing.calls == [("svc", "a"), ("svc", "b")]


def test_non_io_errors_propagate(sandbox: BindingSandbox) -> None:
    sandbox.write_secret_keys("svc", "b", {"url": "u"})

    with pytest.raises(RuntimeError):
        LayeredServiceBindingAccessor(sandbox.root, [RecordingStrategy("broken", RuntimeError("bug"))]).get_service_bindings()


def test_first_match_wins_and_later_strategies_are_not_invoked(sandbox: BindingSandbox) -> None:
    sandbox.write_root_key("svc", "b", {"url": "u"})
    later = RecordingStrategy("later")

    bindings = LayeredServiceBindingAccessor(
        sandbox.root, [SecretRootKeyParsingStrategy(), SecretKeyParsingStrategy(), later]
    ).get_service_bindings()

    assert [binding.strategy for binding in bindings] == ["secret_root_key"]
    assert later.calls == []


def test_priority_order_is_caller_supplied(sandbox: BindingSandbox) -> None:
    sandbox.write_root_key("svc", "b", {"url": "u"}, key="binding.json")

    bindings = get_service_bindings(sandbox.root, strategies=[SecretKeyParsingStrategy(), SecretRootKeyParsingStrategy()])

    assert bindings[0].strategy == "secret_key"
    assert bindings[0].properties.get_keys() == {"binding.json"}


def test_malformed_data_document_falls_through_to_root_key_layout(sandbox: BindingSandbox) -> None:
    sandbox.write_data("svc", "b", {"credentials": "flat"})

    bindings = get_service_bindings(sandbox.root)

    assert [binding.strategy for binding in bindings] == ["secret_root_key"]
    assert bindings[0].credentials.get_string("credentials") == "flat"


def test_every_call_rescans(sandbox: BindingSandbox) -> None:
    accessor = LayeredServiceBindingAccessor(sandbox.root)
    assert accessor.get_service_bindings() == []

    sandbox.write_secret_keys("svc", "b", {"url": "u"})

    assert len(accessor.get_service_bindings()) == 1


def test_root_and_encoding_from_environment(sandbox: BindingSandbox) -> None:
    sandbox.write_raw("svc", "b", "city", "Zürich".encode("latin-1"))
    env = {**sandbox.env, "LIB_LAYERED_BINDINGS_ENCODING": "latin-1"}

    accessor = LayeredServiceBindingAccessor(env=env)

    assert accessor.root_path == sandbox.root
    assert accessor.get_service_bindings()[0].credentials.get_string("city") == "Zürich"
    assert LayeredServiceBindingAccessor(sandbox.root, env={}).get_service_bindings() == []


def test_scan_emits_structured_events(sandbox: BindingSandbox, caplog: pytest.LogCaptureFixture) -> None:
    sandbox.write_secret_keys("svc", "b", {"url": "secret-value"})
    sandbox.binding_dir("svc", "empty")
    caplog.set_level(logging.DEBUG, logger="lib_layered_bindings")

    get_service_bindings(sandbox.root)

    messages = [record.getMessage() for record in caplog.records]
    assert "binding_parsed" in messages
    assert "binding_skipped" in messages
    scanned = next(record for record in caplog.records if record.getMessage() == "service_bindings_scanned")
    assert getattr(scanned, "context")["bindings"] == 1
    assert all("secret-value" not in str(getattr(record, "context", "")) for record in caplog.records)
