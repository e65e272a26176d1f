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

"""Disk space and I/O activity

Reports capacity for each mounted filesystem together with the number of
reads and writes completed on its underlying block device since the previous
poll. Mounts are rediscovered from the mount table on every poll; I/O
baselines are remembered per base device (e.g. sda for /dev/sda1), so mounts
appearing, disappearing or changing order never mix up their counters.

At most MAX_DISKS filesystems are reported; further mounts are dropped and
the result is flagged as truncated.
"""

import configparser
import logging
import os
import re
from typing import Dict, Optional, Tuple

import hoststat.utils as utils
from hoststat.collector_base import Collector
from hoststat.errors import SourceUnavailable
from hoststat.models import DiskInfo, DiskStats
from hoststat.sample_store import SampleStore
from hoststat.sources import CounterSource, DiskCounters

MAX_DISKS = 8


def base_device_name(device: str) -> str:
    """Strip the directory and any partition suffix from a device path.

    /dev/sda1 -> sda, /dev/nvme0n1p2 -> nvme0n1, /dev/mmcblk0p1 -> mmcblk0

    Whole disks come back unchanged (/dev/mmcblk0, /dev/md0, /dev/sda).
    """
    name = os.path.basename(device.rstrip("/"))
    match = re.match(r"^(.*\d)p\d+$", name)
    if match:
        return match.group(1)
    # only sd/hd/vd/xvd disks number partitions directly after the letters
    match = re.match(r"^((?:xv|[shv])d[a-z]+)\d+$", name)
    if match:
        return match.group(1)
    return name


class DISK(Collector):
    subsystem = "disk"

    def __init__(self, config: configparser.ConfigParser, source: CounterSource, store: SampleStore):
        """Initialize the DISK data collector.

        Args:
            config (configparser.ConfigParser): Cached copy of runtime configuration.
            source (CounterSource): Reader for the mount table and /proc/diskstats.
            store (SampleStore): Shared previous-sample storage.
        """
        logging.debug(f"Initializing {self.__class__.__name__} data collector")
        super().__init__(config, source, store)

        section = "hoststat.collectors.disk"
        self.__ignore_devices = utils.splitList(config.get(section, "ignore_devices", fallback="loop, ram, dm-, sr"))
        self.__physical_only = config.getboolean(section, "physical_only", fallback=True)
        self.__warned_diskstats = False

        logging.info(f"--> ignoring devices matching: {self.__ignore_devices}")

    def is_real_disk(self, device: str) -> bool:
        if self.__physical_only and not device.startswith("/"):
            return False
        return not any(pattern in device for pattern in self.__ignore_devices)

    @staticmethod
    def resolve_device(device: str, diskstats: Dict[str, DiskCounters]) -> Optional[str]:
        """Find the diskstats entry for a mount source, preferring the parent disk."""
        base = base_device_name(device)
        if base in diskstats:
            return base
        name = os.path.basename(device.rstrip("/"))
        if name in diskstats:
            return name
        return None

    def __io_delta(self, key: str, counters: DiskCounters) -> Tuple[int, int]:
        reads = writes = 0
        previous = self.store.previous(self.subsystem, key)
        if previous is not None:
            prev_reads, prev_writes = previous.values
            reads = utils.safeDelta(counters.reads, prev_reads)
            writes = utils.safeDelta(counters.writes, prev_writes)
        self.store.update(self.subsystem, key, (counters.reads, counters.writes))
        return (reads, writes)

    def __read_diskstats(self) -> Dict[str, DiskCounters]:
        try:
            diskstats = self.source.read_diskstats()
        except SourceUnavailable as e:
            if not self.__warned_diskstats:
                self.__warned_diskstats = True
                logging.warning(f"Disk I/O counters unavailable, reporting zero activity: {e}")
            return {}
        self.__warned_diskstats = False
        return diskstats

    def sample(self) -> DiskInfo:
        self.store.begin(self.subsystem)
        mounts = self.source.read_mounts()
        diskstats = self.__read_diskstats()

        disks = []
        deltas = {}
        truncated = False
        for mount in mounts:
            if not self.is_real_disk(mount.device):
                continue

            try:
                total, free, available = self.source.read_fs_space(mount.mount_point)
            except OSError as e:
                logging.debug(f"Skipping {mount.mount_point}: {e}")
                continue

            if len(disks) >= MAX_DISKS:
                truncated = True
                logging.debug(f"Disk limit ({MAX_DISKS}) reached, dropping {mount.mount_point}")
                break

            reads = writes = io_in_progress = 0
            key = self.resolve_device(mount.device, diskstats)
            if key is not None:
                # mounts backed by the same device share one delta per poll
                if key not in deltas:
                    deltas[key] = self.__io_delta(key, diskstats[key])
                reads, writes = deltas[key]
                io_in_progress = diskstats[key].io_in_progress

            disks.append(
                DiskStats(
                    device=mount.device,
                    mount_point=mount.mount_point,
                    total=total,
                    free=free,
                    available=available,
                    usage=utils.percentage(total - available, total),
                    reads=reads,
                    writes=writes,
                    io_in_progress=io_in_progress,
                )
            )

        return DiskInfo(disks=tuple(disks), truncated=truncated)
