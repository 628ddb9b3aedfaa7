"""Tests for the pytest plugin exposing the worker identity."""

from __future__ import annotations

import pytest

from parallel_tests.plugin import worker_index_from_env, worker_suffix_from_env


class TestWorkerIdentityHelpers:
    """Tests for reading TEST_ENV_NUMBER."""

    def test_outside_a_worker(self) -> None:
        assert worker_suffix_from_env({}) == ''
        assert worker_index_from_env({}) == 0

    def test_first_worker(self) -> None:
        assert worker_suffix_from_env({'TEST_ENV_NUMBER': ''}) == ''
        assert worker_index_from_env({'TEST_ENV_NUMBER': ''}) == 0

    @pytest.mark.parametrize(('suffix', 'index'), [('2', 1), ('3', 2), ('12', 11)])
    def test_later_workers(self, suffix: str, index: int) -> None:
        assert worker_index_from_env({'TEST_ENV_NUMBER': suffix}) == index

    def test_reads_process_environment_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('TEST_ENV_NUMBER', '4')
        assert worker_suffix_from_env() == '4'
        assert worker_index_from_env() == 3


class TestPluginFixtures:
    """Tests for the fixtures registered by the plugin."""

    def test_fixtures_in_a_worker(self, pytester: pytest.Pytester, monkeypatch: pytest.MonkeyPatch) -> None:
        """Fixtures reflect TEST_ENV_NUMBER of the running worker."""
        monkeypatch.setenv('TEST_ENV_NUMBER', '3')
        pytester.makepyfile(
            test_sample="""
            def test_identity(worker_suffix, worker_index):
                assert worker_suffix == '3'
                assert worker_index == 2
            """
        )

        result = pytester.runpytest('-v')

        result.assert_outcomes(passed=1)
        result.stdout.fnmatch_lines(["*parallel-tests worker: 2 (TEST_ENV_NUMBER='3')*"])

    def test_fixtures_outside_a_worker(self, pytester: pytest.Pytester, monkeypatch: pytest.MonkeyPatch) -> None:
        """Outside a worker the suffix is empty and no header is shown."""
        monkeypatch.delenv('TEST_ENV_NUMBER', raising=False)
        pytester.makepyfile(
            test_sample="""
            def test_identity(worker_suffix, worker_index):
                assert worker_suffix == ''
                assert worker_index == 0
            """
        )

        result = pytester.runpytest()

        result.assert_outcomes(passed=1)
        result.stdout.no_fnmatch_line('*parallel-tests worker*')
