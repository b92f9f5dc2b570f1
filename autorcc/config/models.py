"""Settings for a single rcc job, validated from the info file."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

from autorcc.config.loader import InfoSource, load_info
from autorcc.diagnostics import quoted
from autorcc.errors import ConfigError

MULTI_CONFIG_SUFFIX = "_CMAKE_"


def _join(*parts: str) -> str:
    return "/".join(p for p in parts if p)


def append_filename_suffix(filename: str, suffix: str) -> str:
    """Insert *suffix* before the last extension: ``qrc_a.cpp`` -> ``qrc_a_CMAKE_.cpp``."""
    pos = filename.rfind(".")
    if pos == -1:
        return filename + suffix
    return filename[:pos] + suffix + filename[pos:]


class RccJobSettings(BaseModel):
    info_file: str
    config_name: str = ""
    verbosity: str = ""
    multi_config: bool = False

    build_dir: str
    include_dir: str
    rcc_executable: str
    rcc_list_options: list[str] = Field(default_factory=list)

    lock_file: str
    settings_file: str
    qrc_file: str
    output_checksum: str = ""
    output_name: str
    options: list[str] = Field(default_factory=list)
    inputs: list[str] = Field(default_factory=list)

    @property
    def qrc_name(self) -> str:
        return os.path.basename(self.qrc_file)

    @property
    def qrc_dir(self) -> str:
        return os.path.dirname(self.qrc_file)

    @property
    def public_output(self) -> str:
        """Configuration independent output path under the build dir."""
        return _join(self.build_dir, self.output_checksum, self.output_name)

    @property
    def multi_config_include(self) -> str:
        """Output path relative to the include dir in multi-config builds."""
        return _join(
            self.output_checksum,
            append_filename_suffix(self.output_name, MULTI_CONFIG_SUFFIX),
        )

    @property
    def output(self) -> str:
        """The file rcc actually writes."""
        if self.multi_config:
            return _join(self.include_dir, self.multi_config_include)
        return self.public_output


def _fail(info_file: str, message: str) -> ConfigError:
    return ConfigError(f"In {quoted(info_file)}:\n{message}", path=info_file)


def settings_from_info(info: InfoSource) -> RccJobSettings:
    """Validate an :class:`InfoSource` into job settings.

    Raises ConfigError naming the info file on the first missing value.
    """
    info_file = info.info_file

    build_dir = info.get("ARCC_BUILD_DIR")
    if not build_dir:
        raise _fail(info_file, "Build directory empty.")

    include_dir = info.get_config("ARCC_INCLUDE_DIR")
    if not include_dir:
        raise _fail(info_file, "Include directory empty.")

    rcc_executable = info.get("ARCC_RCC_EXECUTABLE")
    if not rcc_executable or not os.path.exists(rcc_executable):
        raise _fail(info_file, f"The rcc executable {quoted(rcc_executable)} does not exist.")

    lock_file = info.get("ARCC_LOCK_FILE")
    qrc_file = info.get("ARCC_SOURCE")
    output_name = info.get("ARCC_OUTPUT_NAME")
    settings_file = info.get_config("ARCC_SETTINGS_FILE")

    if not lock_file:
        raise _fail(info_file, "Lock file name missing.")
    if not settings_file:
        raise _fail(info_file, "Settings file name missing.")
    if not qrc_file:
        raise _fail(info_file, "rcc input file missing.")
    if not output_name:
        raise _fail(info_file, "rcc output file missing.")

    return RccJobSettings(
        info_file=info_file,
        config_name=info.config_name,
        verbosity=info.get("ARCC_VERBOSITY"),
        multi_config=info.is_on("ARCC_MULTI_CONFIG"),
        build_dir=build_dir,
        include_dir=include_dir,
        rcc_executable=rcc_executable,
        rcc_list_options=info.get_list("ARCC_RCC_LIST_OPTIONS"),
        lock_file=lock_file,
        settings_file=settings_file,
        qrc_file=qrc_file,
        output_checksum=info.get("ARCC_OUTPUT_CHECKSUM"),
        output_name=output_name,
        options=info.get_config_list("ARCC_OPTIONS"),
        inputs=info.get_list("ARCC_INPUTS"),
    )


def load_job_settings(info_file: str | Path, config_name: str = "") -> RccJobSettings:
    """Load and validate the info file for *config_name*."""
    return settings_from_info(load_info(info_file, config_name))
