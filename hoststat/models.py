# -------------------------------------------------------------------------------
# MIT License
#
# Copyright (c) 2023 - 2026 Advanced Micro Devices, Inc. All Rights Reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
# -------------------------------------------------------------------------------

"""Snapshot data model

Read-only records returned by one poll cycle. Byte quantities are in bytes,
rates in bytes per second and percentages in [0, 100].
"""

import time
from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class CPUStats:
    usage: float = 0.0
    cores: int = 0
    model_name: str = ""


@dataclass(frozen=True)
class MemoryStats:
    total: int = 0
    free: int = 0
    available: int = 0
    used: int = 0
    buffers: int = 0
    cached: int = 0
    swap_total: int = 0
    swap_free: int = 0
    usage: float = 0.0
    swap_usage: float = 0.0


@dataclass(frozen=True)
class DiskStats:
    device: str
    mount_point: str
    total: int = 0
    free: int = 0
    available: int = 0
    usage: float = 0.0
    reads: int = 0  # completed reads since previous poll
    writes: int = 0  # completed writes since previous poll
    io_in_progress: int = 0


@dataclass(frozen=True)
class DiskInfo:
    disks: Tuple[DiskStats, ...] = ()
    truncated: bool = False

    @property
    def count(self) -> int:
        return len(self.disks)


@dataclass(frozen=True)
class NetworkInterfaceStats:
    interface: str
    bytes_received: int = 0
    bytes_sent: int = 0
    packets_received: int = 0
    packets_sent: int = 0
    errors_in: int = 0
    errors_out: int = 0
    drops_in: int = 0
    drops_out: int = 0
    receive_speed: float = 0.0
    send_speed: float = 0.0


@dataclass(frozen=True)
class NetworkStats:
    interfaces: Tuple[NetworkInterfaceStats, ...] = ()
    truncated: bool = False

    @property
    def interface_count(self) -> int:
        return len(self.interfaces)


@dataclass(frozen=True)
class GPUStats:
    """Per-device GPU record.

    Only `name` is meaningful when `supported` is False (devices found
    through sysfs enumeration without a vendor library).
    """

    index: int
    name: str = ""
    temperature: int = 0  # celsius
    utilization: float = 0.0
    memory_total: int = 0
    memory_used: int = 0
    memory_free: int = 0
    power_usage: int = 0  # milliwatts
    fan_speed: int = 0  # percent
    supported: bool = False


@dataclass(frozen=True)
class GPUInfo:
    gpus: Tuple[GPUStats, ...] = ()
    backend: str = "none"
    nvidia_available: bool = False
    truncated: bool = False

    @property
    def count(self) -> int:
        return len(self.gpus)


@dataclass(frozen=True)
class MetricsSnapshot:
    cpu: CPUStats
    memory: MemoryStats
    disks: DiskInfo
    network: NetworkStats
    gpus: GPUInfo
    timestamp: float = field(default_factory=time.time)
