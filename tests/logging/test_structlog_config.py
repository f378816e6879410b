# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for StructlogAdapter and session id redaction."""

import io
import json
import logging

import pytest
import structlog

from pysession.core.config import Config
from pysession.logging import LoggingPort, StructlogAdapter, redact_session_ids, session_digest


def _config(**section):
    return Config({"pysession": {"logging": section}})


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def adapter(stream):
    adapter = StructlogAdapter(stream=stream)
    yield adapter
    adapter.reset()
    structlog.reset_defaults()
    for name in ("pysession", "pysession.adapters.redis"):
        logging.getLogger(name).setLevel(logging.NOTSET)


class TestSessionDigest:
    def test_digest_is_short_and_stable(self):
        assert session_digest("abc") == session_digest("abc")
        assert len(session_digest("abc")) == 12
        assert session_digest("abc") != "abc"

    def test_empty_id_has_no_digest(self):
        assert session_digest(None) is None
        assert session_digest("") is None

    def test_processor_hashes_id_fields_only(self):
        event = redact_session_ids(None, "info", {"event": "x", "session_id": "abc", "sid": None, "user": "bob"})
        assert event == {"event": "x", "session_id": session_digest("abc"), "sid": None, "user": "bob"}


class TestStructlogAdapter:
    def test_implements_logging_port(self):
        assert isinstance(StructlogAdapter(), LoggingPort)

    def test_json_events_go_to_own_handler(self, adapter, stream):
        adapter.configure(_config(format="json"))
        structlog.get_logger("pysession.test").info("session_saved", session_id="abc")

        event = json.loads(stream.getvalue().strip())
        assert event["event"] == "session_saved"
        assert event["logger"] == "pysession.test"
        assert event["level"] == "info"
        assert event["session_id"] == session_digest("abc")

    def test_redaction_can_be_disabled(self, adapter, stream):
        adapter.configure(_config(format="json", redact="false"))
        structlog.get_logger("pysession.test").info("session_saved", session_id="abc")
        assert json.loads(stream.getvalue().strip())["session_id"] == "abc"

    def test_level_name_applies_to_tree(self, adapter, stream):
        adapter.configure(_config(level="warning"))
        structlog.get_logger("pysession.test").info("session_saved")
        assert stream.getvalue() == ""
        assert logging.getLogger("pysession").level == logging.WARNING

    def test_level_mapping_sets_per_logger_levels(self, adapter):
        adapter.configure(_config(level={"pysession.adapters.redis": "debug"}))
        assert adapter.levels == {"pysession": "INFO", "pysession.adapters.redis": "DEBUG"}
        assert logging.getLogger("pysession.adapters.redis").level == logging.DEBUG

    def test_root_logger_is_left_alone(self, adapter):
        root_handlers = list(logging.getLogger().handlers)
        adapter.configure(_config())
        assert logging.getLogger().handlers == root_handlers
        assert logging.getLogger("pysession").propagate is False

    def test_reconfigure_keeps_one_handler(self, adapter):
        adapter.configure(_config())
        adapter.configure(_config(format="json"))
        owned = [h for h in logging.getLogger("pysession").handlers if h is adapter._handler]
        assert len(owned) == 1

    def test_reset_restores_propagation(self, adapter):
        adapter.configure(_config())
        handler = adapter._handler
        adapter.reset()
        assert handler not in logging.getLogger("pysession").handlers
        assert logging.getLogger("pysession").propagate is True
