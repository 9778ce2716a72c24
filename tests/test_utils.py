"""Tests for environment-driven configuration helpers"""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from ctxgrep.models import SearchConfig
from ctxgrep.utils import DEFAULT_MAX_WORKERS, get_int_env, get_log_level, get_max_workers


class TestEnvHelpers:
    """Tests for get_int_env() and friends"""

    def test_get_int_env_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert get_int_env('CTXGREP_UNSET', 7) == 7

    def test_get_int_env_garbage_falls_back(self):
        with patch.dict(os.environ, {'CTXGREP_X': 'many'}):
            assert get_int_env('CTXGREP_X', 3) == 3

    def test_max_workers_from_env(self):
        with patch.dict(os.environ, {'CTXGREP_MAX_WORKERS': '4'}):
            assert get_max_workers() == 4

    def test_max_workers_ignores_non_positive(self):
        with patch.dict(os.environ, {'CTXGREP_MAX_WORKERS': '0'}):
            assert get_max_workers() == DEFAULT_MAX_WORKERS

    def test_log_level_debug_flag_wins(self):
        with patch.dict(os.environ, {'CTXGREP_LOG_LEVEL': 'ERROR'}):
            assert get_log_level(debug=True) == logging.DEBUG

    def test_log_level_from_env(self):
        with patch.dict(os.environ, {'CTXGREP_LOG_LEVEL': 'info'}):
            assert get_log_level() == logging.INFO

    def test_log_level_unknown_name(self):
        with patch.dict(os.environ, {'CTXGREP_LOG_LEVEL': 'chatty'}):
            assert get_log_level() == logging.WARNING


class TestSearchConfig:
    """Tests for SearchConfig helpers and validation"""

    def test_resolve_context_precedence(self):
        assert SearchConfig.resolve_context(None, None, None) == (0, 0)
        assert SearchConfig.resolve_context(3, None, None) == (3, 3)
        assert SearchConfig.resolve_context(3, 1, None) == (1, 3)
        assert SearchConfig.resolve_context(None, 2, 5) == (2, 5)

    def test_is_immutable(self):
        config = SearchConfig(pattern='x')
        with pytest.raises(ValidationError):
            config.pattern = 'y'
        assert config.pattern == 'x'

    def test_rejects_negative_context(self):
        with pytest.raises(ValidationError):
            SearchConfig(pattern='x', before_context=-1)

    def test_file_names_shown(self):
        assert not SearchConfig(pattern='x').file_names_shown(1)
        assert SearchConfig(pattern='x').file_names_shown(2)
        assert SearchConfig(pattern='x', show_file_names=True).file_names_shown(1)
        assert not SearchConfig(pattern='x', show_file_names=False).file_names_shown(3)
