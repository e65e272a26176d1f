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

import configparser

import pytest

from hoststat.sample_store import SampleStore
from hoststat.sources import CounterSource

NET_DEV_HEADER = (
    "Inter-|   Receive                                                |  Transmit\n"
    " face |bytes    packets errs drop fifo frame compressed multicast|"
    "bytes    packets errs drop fifo colls carrier compressed\n"
)


class FakeHost:
    """Minimal /proc, /sys and mount table tree for collector tests."""

    def __init__(self, root):
        self.root = root
        self.proc = root / "proc"
        self.sys = root / "sys"
        self.mtab = root / "mtab"
        self.proc.mkdir()
        self.sys.mkdir()

    def write(self, relpath, text):
        path = self.root / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    def set_cpu(self, idle, total, iowait=0):
        user = total - idle - iowait
        self.write("proc/stat", f"cpu  {user} 0 0 {idle} {iowait} 0 0 0 0 0\ncpu0 {user} 0 0 {idle} {iowait} 0 0 0 0 0\n")

    def set_cpuinfo(self, model):
        self.write("proc/cpuinfo", f"processor\t: 0\nvendor_id\t: GenuineIntel\nmodel name\t: {model}\n")

    def set_meminfo(self, **fields):
        lines = [f"{label}:{value:>16} kB\n" for label, value in fields.items()]
        self.write("proc/meminfo", "".join(lines))

    def set_mounts(self, mounts):
        lines = [f"{device} {mount_point} {fstype} rw,relatime 0 0\n" for device, mount_point, fstype in mounts]
        self.write("mtab", "".join(lines))

    def set_diskstats(self, disks):
        lines = []
        for name, (reads, writes, in_progress) in disks.items():
            lines.append(f"   8       0 {name} {reads} 0 0 0 {writes} 0 0 0 {in_progress} 0 0 0 0 0 0\n")
        self.write("proc/diskstats", "".join(lines))

    def set_net_dev(self, interfaces):
        lines = [NET_DEV_HEADER]
        for name, (rx_bytes, tx_bytes) in interfaces.items():
            lines.append(f"{name:>6}: {rx_bytes} 10 1 2 0 0 0 0 {tx_bytes} 20 3 4 0 0 0 0\n")
        self.write("proc/net/dev", "".join(lines))

    def add_drm_card(self, index, product=None):
        device = f"sys/class/drm/card{index}/device"
        self.write(f"{device}/vendor", "0x1002\n")
        if product is not None:
            self.write(f"{device}/product", f"{product}\n")


@pytest.fixture
def host(tmp_path):
    return FakeHost(tmp_path)


@pytest.fixture
def config(host):
    config = configparser.ConfigParser()
    config["hoststat.collectors"] = {
        "proc_path": str(host.proc),
        "sys_path": str(host.sys),
        "mounts_path": str(host.mtab),
        "enable_gpu": "True",
    }
    config["hoststat.collectors.gpu"] = {"enable_nvml": "False"}
    return config


@pytest.fixture
def source(config):
    return CounterSource.fromConfig(config)


@pytest.fixture
def store():
    return SampleStore()
