"""Fingerprint of the job configuration relevant to regeneration."""

from __future__ import annotations

import hashlib

from autorcc.config.models import RccJobSettings

SEPARATOR = " ~~~ "


def compute_fingerprint(settings: RccJobSettings) -> str:
    """SHA-256 over the ordered, separator-terminated settings fields.

    Lists are joined with ``;``. Inputs are the explicitly configured ones,
    not those discovered through the lister.
    """
    fields = [
        settings.rcc_executable,
        ";".join(settings.rcc_list_options),
        settings.qrc_file,
        settings.output_checksum,
        settings.output_name,
        ";".join(settings.options),
        ";".join(settings.inputs),
    ]
    joined = "".join(field + SEPARATOR for field in fields)
    return hashlib.sha256(joined.encode()).hexdigest()
