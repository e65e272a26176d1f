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

"""Counter sources

Thin readers for the kernel interfaces consumed by the collectors. Nothing
here keeps state between calls: every method opens its file, parses it and
returns raw cumulative values. All paths hang off configurable roots so tests
can point the readers at a fake /proc or /sys tree.

Example /proc/stat first line (user nice system idle iowait irq softirq steal):
    cpu  4705 356 584 3699176 23060 0 277 0 0 0
"""

import logging
import os
import re
from pathlib import Path
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

from hoststat.errors import MalformedRecord, SourceUnavailable

KB_TO_BYTES = 1024


class MountEntry(NamedTuple):
    device: str
    mount_point: str
    fstype: str


class DiskCounters(NamedTuple):
    reads: int
    writes: int
    io_in_progress: int


class InterfaceCounters(NamedTuple):
    bytes_received: int
    packets_received: int
    errors_in: int
    drops_in: int
    bytes_sent: int
    packets_sent: int
    errors_out: int
    drops_out: int


class CounterSource:
    def __init__(self, proc_path="/proc", sys_path="/sys", mounts_path="/etc/mtab"):
        self.proc_path = Path(proc_path)
        self.sys_path = Path(sys_path)
        self.mounts_path = Path(mounts_path)

    @classmethod
    def fromConfig(cls, config):
        section = "hoststat.collectors"
        return cls(
            proc_path=config.get(section, "proc_path", fallback="/proc"),
            sys_path=config.get(section, "sys_path", fallback="/sys"),
            mounts_path=config.get(section, "mounts_path", fallback="/etc/mtab"),
        )

    @staticmethod
    def __read_lines(path: Path) -> List[str]:
        # mount points and interface names are bytes; undecodable ones must
        # round-trip unchanged through os calls such as statvfs
        try:
            with open(path, "r", errors="surrogateescape") as f:
                return f.readlines()
        except OSError as e:
            raise SourceUnavailable(path, e.strerror) from e

    # --
    # CPU
    # --

    def read_cpu_times(self) -> Tuple[int, int]:
        """Read aggregate CPU time buckets from the first line of /proc/stat.

        Returns:
            tuple: (idle_jiffies, total_jiffies) where idle includes iowait and
            total is the sum of user, nice, system, idle, iowait, irq, softirq
            and steal.
        """
        path = self.proc_path / "stat"
        lines = self.__read_lines(path)
        first = lines[0] if lines else ""
        fields = first.split()
        if len(fields) < 9 or fields[0] != "cpu":
            raise MalformedRecord(path, first.strip())
        try:
            values = [int(v) for v in fields[1:9]]
        except ValueError:
            raise MalformedRecord(path, first.strip())

        idle = values[3] + values[4]
        total = sum(values)
        return (idle, total)

    def read_cpu_model(self) -> Optional[str]:
        """Return the value of the first "model name" entry in /proc/cpuinfo."""
        try:
            lines = self.__read_lines(self.proc_path / "cpuinfo")
        except SourceUnavailable as e:
            logging.debug(f"{e}")
            return None
        for line in lines:
            if line.startswith("model name"):
                label, sep, value = line.partition(":")
                if sep:
                    return value.strip()
        return None

    # --
    # Memory
    # --

    def read_meminfo(self) -> Dict[str, int]:
        """Parse /proc/meminfo into a dict of label -> bytes."""
        path = self.proc_path / "meminfo"
        meminfo = {}
        for line in self.__read_lines(path):
            label, sep, rest = line.partition(":")
            if not sep:
                continue
            parts = rest.split()
            if not parts:
                continue
            try:
                value = int(parts[0])
            except ValueError:
                continue
            if len(parts) > 1 and parts[1] == "kB":
                value *= KB_TO_BYTES
            meminfo[label.strip()] = value
        return meminfo

    # --
    # Disk
    # --

    def read_mounts(self) -> List[MountEntry]:
        """List mounted filesystems from the mount table (mtab format)."""
        mounts = []
        for line in self.__read_lines(self.mounts_path):
            parts = line.split()
            if len(parts) < 3 or parts[0].startswith("#"):
                continue
            mounts.append(MountEntry(self.__unescape(parts[0]), self.__unescape(parts[1]), parts[2]))
        return mounts

    @staticmethod
    def __unescape(field: str) -> str:
        # mtab encodes blanks and backslashes as octal escapes (\040, \011, \134)
        return re.sub(r"\\([0-7]{3})", lambda m: chr(int(m.group(1), 8)), field)

    def read_fs_space(self, mount_point: str) -> Tuple[int, int, int]:
        """Return (total, free, available) bytes of the filesystem at mount_point.

        Raises OSError if the filesystem cannot be queried.
        """
        st = os.statvfs(mount_point)
        return (st.f_blocks * st.f_frsize, st.f_bfree * st.f_frsize, st.f_bavail * st.f_frsize)

    def read_diskstats(self) -> Dict[str, DiskCounters]:
        """Parse /proc/diskstats into a dict of device name -> counters.

        Lines carry: major minor name, then reads completed (4), reads merged,
        sectors read, ms reading, writes completed (8), writes merged, sectors
        written, ms writing, I/Os in progress (12), ... Records with fewer than
        12 numeric fields after the name are skipped.
        """
        path = self.proc_path / "diskstats"
        stats = {}
        for line in self.__read_lines(path):
            parts = line.split()
            if len(parts) < 14:
                logging.debug(f"Skipping short diskstats record: {line.strip()}")
                continue
            try:
                stats[parts[2]] = DiskCounters(int(parts[3]), int(parts[7]), int(parts[11]))
            except ValueError:
                logging.debug(f"Skipping malformed diskstats record: {line.strip()}")
        return stats

    # --
    # Network
    # --

    def read_net_dev(self) -> Iterator[Tuple[str, InterfaceCounters]]:
        """Yield (interface, counters) for every parseable line of /proc/net/dev.

        Format after the two header lines:
            eth0: rx_bytes rx_packets rx_errs rx_drop rx_fifo rx_frame rx_compressed rx_multicast
                  tx_bytes tx_packets tx_errs tx_drop tx_fifo tx_colls tx_carrier tx_compressed
        """
        path = self.proc_path / "net" / "dev"
        lines = self.__read_lines(path)
        for line in lines[2:]:
            name, sep, rest = line.partition(":")
            name = name.strip()
            fields = rest.split()
            if not sep or not name or len(fields) < 12:
                logging.debug(f"Skipping malformed net/dev record: {line.strip()}")
                continue
            try:
                values = [int(v) for v in fields[0:4] + fields[8:12]]
            except ValueError:
                logging.debug(f"Skipping malformed net/dev record: {line.strip()}")
                continue
            yield name, InterfaceCounters(*values)

    # --
    # GPU (generic DRM class enumeration)
    # --

    def read_drm_cards(self) -> List[Tuple[int, Path]]:
        """Return (index, device_dir) of DRM cards exposing a vendor id, by index."""
        drm_path = self.sys_path / "class" / "drm"
        if not drm_path.is_dir():
            return []

        cards = []
        for entry in drm_path.iterdir():
            match = re.match(r"^card(\d+)$", entry.name)
            if not match:
                continue
            device = entry / "device"
            if (device / "vendor").is_file():
                cards.append((int(match.group(1)), device))
        return sorted(cards)

    @staticmethod
    def read_drm_name(device: Path) -> Optional[str]:
        for filename in ("product_name", "product"):
            try:
                with open(device / filename, "r", errors="surrogateescape") as f:
                    name = f.readline().strip()
            except OSError:
                continue
            if name:
                return name
        return None
