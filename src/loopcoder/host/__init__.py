from loopcoder.host.base_host import BaseHost, CommandOutput, FileEntry, FileStats
from loopcoder.host.local_host import LocalHost


__all__ = ["BaseHost", "CommandOutput", "FileEntry", "FileStats", "LocalHost"]
