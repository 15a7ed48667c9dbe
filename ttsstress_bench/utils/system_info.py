"""
Host information recorded alongside benchmark results
"""
from dataclasses import dataclass, asdict
from typing import Dict, Any
import platform
import psutil
import sys


@dataclass(frozen=True)
class HostInfo:
    platform: str
    python_version: str
    cpu_cores: int
    system_memory_gb: float
    hostname: str


def get_host_info() -> HostInfo:
    """Collect a snapshot of the machine driving the load test"""
    return HostInfo(
        platform=platform.platform(),
        python_version=sys.version.split()[0],
        cpu_cores=psutil.cpu_count(logical=True) or 0,
        system_memory_gb=round(psutil.virtual_memory().total / (1024 ** 3), 1),
        hostname=platform.node()
    )


def host_info_dict() -> Dict[str, Any]:
    return asdict(get_host_info())
