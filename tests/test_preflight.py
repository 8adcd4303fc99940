"""Tests for launcher preflight checks."""

import pytest

from branchmap.preflight import run_preflight, run_preflight_or_die


class TestPreflight:

    def test_skip_via_env(self):
        result = run_preflight(environ={"BRANCHMAP_SKIP_PREFLIGHT": "1"})
        assert result.ok
        assert "skipped" in result.message

    def test_no_display(self):
        result = run_preflight(check_deps=False, environ={})
        assert not result.ok
        assert "DISPLAY" in result.message

    @pytest.mark.parametrize("env", [{"DISPLAY": ":0"}, {"WAYLAND_DISPLAY": "wayland-0"}])
    def test_display_present(self, env):
        assert run_preflight(check_deps=False, environ=env).ok

    def test_display_not_required(self):
        assert run_preflight(require_display=False, check_deps=False, environ={}).ok

    def test_or_die_exits(self, monkeypatch, capsys):
        monkeypatch.delenv("BRANCHMAP_SKIP_PREFLIGHT", raising=False)
        monkeypatch.delenv("DISPLAY", raising=False)
        monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)

        with pytest.raises(SystemExit) as excinfo:
            run_preflight_or_die(check_deps=False)

        assert excinfo.value.code == 1
        assert "preflight check failed" in capsys.readouterr().err
