"""Shared test fixtures for autorcc."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest
import yaml

from autorcc.config.models import RccJobSettings, load_job_settings

# 2001-09-09, comfortably in the past so anything written during a test is newer
OLD_NS = 1_000_000_000 * 1_000_000_000


def set_mtime(path: Path | str, ns: int) -> None:
    os.utime(path, ns=(ns, ns))


def write_info(path: Path, values: dict) -> Path:
    path.write_text(yaml.safe_dump(values))
    set_mtime(path, OLD_NS)
    return path


class FakeRcc:
    """Stands in for subprocess.run: records calls and writes the -o file."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "", write: bool = True):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.write = write
        self.calls: list[dict] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append({"cmd": list(cmd), **kwargs})
        if self.write and "-o" in cmd:
            out = Path(cmd[cmd.index("-o") + 1])
            out.write_bytes(b"compiled resources")
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def fake_rcc():
    return FakeRcc()


@pytest.fixture
def make_fake_rcc():
    """Factory for FakeRcc with a custom exit code or output."""
    return FakeRcc


@pytest.fixture
def project(tmp_path: Path) -> dict[str, Path]:
    """A .qrc with two inputs, an rcc executable and an empty build dir, all old."""
    src = tmp_path / "src"
    src.mkdir()
    qrc = src / "a.qrc"
    qrc.write_text("<RCC><qresource><file>icon.png</file><file>text.txt</file></qresource></RCC>")
    icon = src / "icon.png"
    icon.write_bytes(b"\x89PNG")
    text = src / "text.txt"
    text.write_text("hello")

    bindir = tmp_path / "bin"
    bindir.mkdir()
    rcc = bindir / "rccbin"
    rcc.write_text("#!/bin/sh\n")

    build = tmp_path / "build"
    build.mkdir()

    for p in (qrc, icon, text, rcc):
        set_mtime(p, OLD_NS)

    return {
        "root": tmp_path,
        "qrc": qrc,
        "icon": icon,
        "text": text,
        "rcc": rcc,
        "build": build,
    }


@pytest.fixture
def info_values(project) -> dict:
    build = project["build"]
    return {
        "ARCC_BUILD_DIR": str(build),
        "ARCC_INCLUDE_DIR": str(build / "include"),
        "ARCC_RCC_EXECUTABLE": str(project["rcc"]),
        "ARCC_RCC_LIST_OPTIONS": ["--list"],
        "ARCC_LOCK_FILE": str(build / "a_Lock.lock"),
        "ARCC_SOURCE": str(project["qrc"]),
        "ARCC_OUTPUT_CHECKSUM": "3f9a",
        "ARCC_OUTPUT_NAME": "qrc_a.cpp",
        "ARCC_OPTIONS": ["--name", "a"],
        "ARCC_INPUTS": [str(project["icon"]), str(project["text"])],
        "ARCC_SETTINGS_FILE": str(build / "a_Used.txt"),
    }


@pytest.fixture
def info_file(project, info_values) -> Path:
    return write_info(project["root"] / "AutoRccInfo.yaml", info_values)


@pytest.fixture
def settings(info_file) -> RccJobSettings:
    return load_job_settings(info_file)
