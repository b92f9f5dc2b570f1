from .loader import InfoSource, load_info
from .models import RccJobSettings, append_filename_suffix, load_job_settings, settings_from_info

__all__ = [
    "InfoSource",
    "RccJobSettings",
    "append_filename_suffix",
    "load_info",
    "load_job_settings",
    "settings_from_info",
]
