from __future__ import annotations

import logging

import pytest

from simpananku.utils.logging_config import LOG_FILE_NAME, SecretFilter, redact, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_redact_masks_tokens_and_codes() -> None:
    url = "simpananku://auth/callback?code=CCC&state=s#access_token=AAA&refresh_token=BBB"
    assert redact(url) == "simpananku://auth/callback?code=***&state=s#access_token=***&refresh_token=***"


def test_redact_leaves_other_text_alone() -> None:
    assert redact("Routing to sign_in") == "Routing to sign_in"


def test_filter_rewrites_formatted_message() -> None:
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "got %s", ("x?code=CCC",), None)

    assert SecretFilter().filter(record)
    assert record.getMessage() == "got x?code=***"


def test_setup_logging_writes_redacted_file(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("SIMPANANKU_LOG_LEVEL", "debug")
    setup_logging(tmp_path)

    assert logging.getLogger().level == logging.DEBUG
    logging.getLogger("simpananku.test").debug("link simpananku://auth/callback#access_token=AAA")
    for handler in logging.getLogger().handlers:
        handler.flush()

    written = (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "access_token=***" in written
    assert "AAA" not in written
