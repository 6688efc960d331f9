import os
import platform
import sys

from loopcoder.lctypes import EnvInfo
from loopcoder.utils.shell_utils import default_shell


def detect_env() -> EnvInfo:
    python_version = (
        f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    )
    return EnvInfo(
        os_name=sys.platform,
        os_version=platform.release(),
        python_version=python_version,
        virtualenv=os.environ.get("VIRTUAL_ENV") or os.environ.get("CONDA_DEFAULT_ENV"),
        default_shell=default_shell(),
        home_dir=os.path.expanduser("~"),
        cwd=os.getcwd(),
    )
