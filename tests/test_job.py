"""End-to-end tests for AutoRccJob: decide, regenerate, wrap, record."""

from __future__ import annotations

import fcntl
import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from autorcc.diagnostics import Diagnostics
from autorcc.errors import AutoRccError, PersistenceError, ToolError
from autorcc.freshness import Outcome
from autorcc.job import AutoRccJob, run_job
from autorcc.ledger import LEDGER_TAG
from autorcc.ledger.lock import FileLock

OLD_NS = 1_000_000_000 * 1_000_000_000


def _mtime(path) -> int:
    return os.stat(path).st_mtime_ns


def _run(job: AutoRccJob, fake):
    with patch("autorcc.rcc.compiler.subprocess.run", side_effect=fake):
        return job.process()


# ── First and second run ─────────────────────────────────────────────


class TestFirstRun:
    def test_regenerates_missing_output(self, settings, fake_rcc):
        job = AutoRccJob(settings, Diagnostics())
        report = _run(job, fake_rcc)

        assert report.decision.outcome is Outcome.regenerate
        assert "doesn't exist" in report.decision.reason
        assert report.regenerated
        assert report.settings_changed
        assert Path(settings.output).is_file()
        assert len(fake_rcc.calls) == 1

    def test_writes_ledger(self, settings, fake_rcc):
        job = AutoRccJob(settings, Diagnostics())
        _run(job, fake_rcc)
        content = Path(settings.settings_file).read_text()
        assert content == f"{LEDGER_TAG}:{job.fingerprint}\n"

    def test_creates_lock_file_and_releases(self, settings, fake_rcc):
        _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        assert Path(settings.lock_file).is_file()
        # a second holder can take the lock straight away
        with FileLock(settings.lock_file) as lock:
            assert lock.locked


class TestSecondRun:
    def test_skips_without_writes(self, settings, fake_rcc):
        _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        out, ledger = Path(settings.output), Path(settings.settings_file)
        before = (_mtime(out), _mtime(ledger), ledger.read_text())

        report = _run(AutoRccJob(settings, Diagnostics()), fake_rcc)

        assert report.decision.outcome is Outcome.skip
        assert not report.regenerated
        assert not report.settings_changed
        assert len(fake_rcc.calls) == 1
        assert (_mtime(out), _mtime(ledger), ledger.read_text()) == before

    def test_deleted_output_regenerates(self, settings, fake_rcc):
        _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        Path(settings.output).unlink()

        report = _run(AutoRccJob(settings, Diagnostics()), fake_rcc)

        assert report.decision.outcome is Outcome.regenerate
        assert len(fake_rcc.calls) == 2

    @pytest.mark.parametrize("content", ["", "resource:deadbeef\n", "junk"])
    def test_cleared_or_corrupt_ledger_regenerates(self, settings, fake_rcc, content):
        _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        Path(settings.settings_file).write_text(content)

        report = _run(AutoRccJob(settings, Diagnostics()), fake_rcc)

        assert report.decision.outcome is Outcome.regenerate
        assert "settings changed" in report.decision.reason

    def test_binary_ledger_regenerates(self, settings, fake_rcc):
        _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        Path(settings.settings_file).write_bytes(b"\xff\xfe\x00garbage")

        job = AutoRccJob(settings, Diagnostics())
        with patch("autorcc.rcc.compiler.subprocess.run", side_effect=fake_rcc):
            assert job.run() is True

        assert len(fake_rcc.calls) == 2
        assert Path(settings.settings_file).read_text().startswith(f"{LEDGER_TAG}:")

    def test_changed_options_regenerate(self, settings, fake_rcc):
        _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        changed = settings.model_copy(update={"options": ["--compress", "9"]})

        report = _run(AutoRccJob(changed, Diagnostics()), fake_rcc)

        assert report.decision.outcome is Outcome.regenerate
        assert "--compress" in fake_rcc.calls[-1]["cmd"]

    def test_info_file_newer_touches_output(self, settings, info_file, fake_rcc):
        _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        out = Path(settings.output)
        os.utime(out, ns=(OLD_NS + 1, OLD_NS + 1))
        os.utime(info_file, ns=(OLD_NS + 2, OLD_NS + 2))

        report = _run(AutoRccJob(settings, Diagnostics()), fake_rcc)

        assert report.decision.outcome is Outcome.skip
        assert report.output_touched
        assert report.build_file_changed
        assert _mtime(out) > OLD_NS + 2
        assert len(fake_rcc.calls) == 1


# ── Failures ─────────────────────────────────────────────────────────


class TestFailures:
    def test_tool_failure_cleans_up_and_leaves_ledger_cleared(self, settings, make_fake_rcc):
        fake = make_fake_rcc(returncode=1, stderr="syntax error")
        job = AutoRccJob(settings, Diagnostics())

        with pytest.raises(ToolError):
            _run(job, fake)

        assert not Path(settings.output).exists()
        assert Path(settings.settings_file).read_text() == ""

    def test_failed_run_forces_next_regeneration(self, settings, fake_rcc, make_fake_rcc):
        _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        changed = settings.model_copy(update={"options": ["--compress", "9"]})
        with pytest.raises(ToolError):
            _run(AutoRccJob(changed, Diagnostics()), make_fake_rcc(returncode=1))

        # back to the first settings: the cleared ledger still forces a rebuild
        report = _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        assert report.decision.outcome is Outcome.regenerate

    def test_lock_released_after_failure(self, settings, make_fake_rcc):
        with pytest.raises(ToolError):
            _run(AutoRccJob(settings, Diagnostics()), make_fake_rcc(returncode=1))
        with FileLock(settings.lock_file) as lock:
            assert lock.locked

    def test_lock_held_while_rcc_runs(self, settings, fake_rcc):
        def rcc_under_lock(cmd, **kwargs):
            with open(settings.lock_file) as other:
                with pytest.raises(BlockingIOError):
                    fcntl.flock(other.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            return fake_rcc(cmd, **kwargs)

        _run(AutoRccJob(settings, Diagnostics()), rcc_under_lock)
        assert len(fake_rcc.calls) == 1

        report = _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        assert report.decision.outcome is Outcome.skip
        assert len(fake_rcc.calls) == 1

    def test_missing_input_fails(self, settings, project, fake_rcc):
        _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        project["icon"].unlink()

        with pytest.raises(AutoRccError, match="Could not find the resource file"):
            _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        assert len(fake_rcc.calls) == 1

    def test_ledger_write_failure(self, settings, fake_rcc):
        job = AutoRccJob(settings, Diagnostics())
        real_write = Path.write_text

        def _write(self, data, *args, **kwargs):
            if data.startswith(f"{LEDGER_TAG}:"):
                raise OSError("disk full")
            return real_write(self, data, *args, **kwargs)

        with patch.object(Path, "write_text", _write):
            with pytest.raises(PersistenceError):
                _run(job, fake_rcc)
        assert not Path(settings.settings_file).exists()

    def test_run_reports_and_returns_false(self, settings, make_fake_rcc, caplog):
        job = AutoRccJob(settings, Diagnostics())
        with caplog.at_level("ERROR", logger="autorcc"):
            with patch(
                "autorcc.rcc.compiler.subprocess.run",
                side_effect=make_fake_rcc(returncode=3, stderr="rcc exploded"),
            ):
                assert job.run() is False

        assert "AutoRcc error" in caplog.text
        assert "rcc exploded" in caplog.text
        assert "Command" in caplog.text
        assert settings.info_file in caplog.text

    def test_run_returns_true(self, settings, fake_rcc):
        with patch("autorcc.rcc.compiler.subprocess.run", side_effect=fake_rcc):
            assert AutoRccJob(settings, Diagnostics()).run() is True


# ── Multi-config wrapper ─────────────────────────────────────────────


@pytest.fixture
def multi_info(project, info_values):
    info_values["ARCC_MULTI_CONFIG"] = "ON"
    info_values["ARCC_INCLUDE_DIR_Debug"] = str(project["build"] / "include_Debug")
    info_values["ARCC_SETTINGS_FILE_Debug"] = str(project["build"] / "a_Used_Debug.txt")
    path = project["root"] / "AutoRccInfo.yaml"
    path.write_text(yaml.safe_dump(info_values))
    os.utime(path, ns=(OLD_NS, OLD_NS))
    return path


class TestMultiConfig:
    def test_wrapper_written_once(self, multi_info, fake_rcc):
        job = AutoRccJob.from_info_file(multi_info, "Debug", Diagnostics())
        first = _run(job, fake_rcc)
        wrapper = Path(job.settings.public_output)
        assert first.wrapper == "written"
        assert "include_Debug" in job.settings.output
        assert "#include <3f9a/qrc_a_CMAKE_.cpp>" in wrapper.read_text()
        before = _mtime(wrapper)

        second = _run(AutoRccJob.from_info_file(multi_info, "Debug", Diagnostics()), fake_rcc)

        assert second.decision.outcome is Outcome.skip
        assert second.wrapper is None
        assert _mtime(wrapper) == before

    def test_regeneration_touches_unchanged_wrapper(self, multi_info, fake_rcc):
        job = AutoRccJob.from_info_file(multi_info, "Debug", Diagnostics())
        _run(job, fake_rcc)
        wrapper = Path(job.settings.public_output)
        os.utime(wrapper, ns=(OLD_NS, OLD_NS))
        Path(job.settings.output).unlink()

        report = _run(AutoRccJob.from_info_file(multi_info, "Debug", Diagnostics()), fake_rcc)

        assert report.regenerated
        assert report.wrapper == "touched"
        assert _mtime(wrapper) > OLD_NS

    def test_binary_bundle_at_wrapper_path_is_replaced(self, multi_info, fake_rcc):
        job = AutoRccJob.from_info_file(multi_info, "Debug", Diagnostics())
        wrapper = Path(job.settings.public_output)
        wrapper.parent.mkdir(parents=True)
        wrapper.write_bytes(b"qres\xff\xfe\x00binary rcc")

        with patch("autorcc.rcc.compiler.subprocess.run", side_effect=fake_rcc):
            assert job.run() is True

        assert "#include <3f9a/qrc_a_CMAKE_.cpp>" in wrapper.read_text()

    def test_per_config_settings_file(self, multi_info, project, fake_rcc):
        _run(AutoRccJob.from_info_file(multi_info, "Debug", Diagnostics()), fake_rcc)
        assert (project["build"] / "a_Used_Debug.txt").read_text().startswith("resource:")
        assert not (project["build"] / "a_Used.txt").exists()


# ── preview / run_job ────────────────────────────────────────────────


class TestPreviewAndRunJob:
    def test_preview_does_not_mutate(self, settings, fake_rcc):
        _run(AutoRccJob(settings, Diagnostics()), fake_rcc)
        changed = settings.model_copy(update={"options": ["-g"]})
        ledger = Path(settings.settings_file)
        before = ledger.read_text()

        preview = AutoRccJob(changed, Diagnostics()).preview()

        assert preview.decision.outcome is Outcome.regenerate
        assert preview.settings_changed is True
        assert preview.regenerated is False
        assert ledger.read_text() == before

    def test_run_job_bad_info_file(self, tmp_path, caplog):
        with caplog.at_level("ERROR", logger="autorcc"):
            assert run_job(tmp_path / "missing.yaml") is False
        assert "File processing failed" in caplog.text

    def test_run_job_success(self, info_file, fake_rcc):
        with patch("autorcc.rcc.compiler.subprocess.run", side_effect=fake_rcc):
            assert run_job(info_file, diagnostics=Diagnostics()) is True

    def test_verbosity_from_info(self, info_values, project):
        info_values["ARCC_VERBOSITY"] = "2"
        path = project["root"] / "info.yaml"
        path.write_text(yaml.safe_dump(info_values))
        job = AutoRccJob.from_info_file(path, diagnostics=Diagnostics())
        assert job.diagnostics.verbosity == 2
