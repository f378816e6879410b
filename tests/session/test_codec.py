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
"""Tests for the default cookie codec and id generator."""

import base64
import re

import pytest

from pysession import codec


class TestCodec:
    def test_decode_reverses_encode(self):
        record = {"name": "Zoë", "n": 3, "_expire": 10}
        assert codec.decode(codec.encode(record)) == record

    def test_encoded_value_is_base64_json(self):
        encoded = codec.encode({"a": 1})
        assert base64.b64decode(encoded) == b'{"a":1}'

    @pytest.mark.parametrize("value", ["not base64!", "e30", base64.b64encode(b"{oops").decode(), "ü"])
    def test_structural_failures_are_value_errors(self, value):
        with pytest.raises(ValueError):
            codec.decode(value)

    def test_snapshot_keeps_insertion_order(self):
        assert codec.snapshot({"b": 1, "a": 2}) != codec.snapshot({"a": 2, "b": 1})


class TestSessionIdGeneration:
    def test_default_id_is_32_hex_chars(self):
        assert re.fullmatch(r"[0-9a-f]{32}", codec.gen_session_id())

    def test_ids_are_unique(self):
        assert len({codec.gen_session_id() for _ in range(100)}) == 100

    def test_prefixed_generator(self):
        generate = codec.prefixed_generator("sess:")
        assert re.fullmatch(r"sess:[0-9a-f]{32}", generate(None))
