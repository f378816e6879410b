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
"""Tests for option defaults and setup-time contract checks."""

import re

import pytest

from pysession import codec
from pysession.exceptions import ConfigurationException
from pysession.options import ONE_HOUR, SESSION, SessionOptions, format_options


class IncompleteStore:
    async def get(self, key, max_age, ctx):
        return None

    async def set(self, key, record, max_age, options):
        pass


class TestDefaults:
    def test_defaults(self):
        opts = format_options()
        assert opts.key == "koa.sess"
        assert opts.max_age is None
        assert opts.overwrite is True
        assert opts.http_only is True
        assert opts.signed is True
        assert opts.auto_commit is True
        assert opts.renew is False
        assert opts.sess_store_age == ONE_HOUR
        assert opts.encode is codec.encode
        assert opts.decode is codec.decode

    def test_empty_key_falls_back(self):
        assert format_options(key="").key == "koa.sess"

    def test_prefix_applies_to_default_generator(self):
        opts = format_options(prefix="app:")
        assert re.fullmatch(r"app:[0-9a-f]{32}", opts.gen_sess_id(None))

    def test_overrides_do_not_mutate_base(self):
        base = SessionOptions(key="a")
        format_options(base, key="b")
        assert base.key == "a"

    def test_cookie_options_carry_attributes(self):
        opts = format_options(secure=True, same_site="strict", domain="example.com")
        cookie = opts.cookie_options(max_age=1000)
        assert cookie.secure is True
        assert cookie.same_site == "strict"
        assert cookie.domain == "example.com"
        assert cookie.max_age == 1000
        assert cookie.signed is True


class TestContractChecks:
    def test_store_missing_destroy_is_rejected(self):
        with pytest.raises(ConfigurationException, match="store.destroy"):
            format_options(store=IncompleteStore())

    def test_custom_sess_id_requires_get_and_set(self):
        class OnlyGet:
            def get(self, ctx):
                return None

        with pytest.raises(ConfigurationException, match="custom_sess_id.set"):
            format_options(custom_sess_id=OnlyGet())

    def test_context_store_class_checked(self):
        with pytest.raises(ConfigurationException, match="context_store.destroy"):
            format_options(context_store=IncompleteStore)

    def test_context_store_must_be_callable(self):
        with pytest.raises(ConfigurationException):
            format_options(context_store="redis")

    @pytest.mark.parametrize("max_age", [0, -1, "forever", True, 1.5])
    def test_invalid_max_age(self, max_age):
        with pytest.raises(ConfigurationException):
            format_options(max_age=max_age)

    def test_session_max_age_is_accepted(self):
        assert format_options(max_age=SESSION).max_age == SESSION

    def test_invalid_store_age(self):
        with pytest.raises(ConfigurationException):
            format_options(sess_store_age=0)

    def test_non_callable_validator(self):
        with pytest.raises(ConfigurationException):
            format_options(valid=True)

    def test_error_code(self):
        with pytest.raises(ConfigurationException) as exc_info:
            format_options(store=IncompleteStore())
        assert exc_info.value.code == "SESSION_CONFIG"
