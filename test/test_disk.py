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

import os
from unittest.mock import patch

import pytest

from hoststat.collector_disk import DISK, MAX_DISKS, base_device_name
from hoststat.errors import SourceUnavailable

BLOCK = 4096


def fs_space(sizes):
    """Build a read_fs_space replacement from {mount_point: (total, free, available)} in blocks."""

    def read_fs_space(mount_point):
        if mount_point not in sizes:
            raise FileNotFoundError(mount_point)
        return tuple(blocks * BLOCK for blocks in sizes[mount_point])

    return read_fs_space


class TestBaseDeviceName:
    @pytest.mark.parametrize(
        "device,expected",
        [
            ("/dev/sda1", "sda"),
            ("/dev/sda", "sda"),
            ("/dev/vdb12", "vdb"),
            ("/dev/nvme0n1p2", "nvme0n1"),
            ("/dev/nvme0n1", "nvme0n1"),
            ("/dev/mmcblk0p1", "mmcblk0"),
            ("/dev/mmcblk0", "mmcblk0"),
            ("/dev/md0", "md0"),
            ("/dev/xvda3", "xvda"),
            ("/dev/root", "root"),
        ],
    )
    def test_partition_suffix(self, device, expected):
        assert base_device_name(device) == expected


class TestDisk:
    @pytest.fixture
    def collector(self, config, source, store):
        return DISK(config, source, store)

    @pytest.fixture
    def space(self, source):
        sizes = {}
        with patch.object(source, "read_fs_space", side_effect=fs_space(sizes)):
            yield sizes

    def test_usage_percentage(self, host, collector, space):
        host.set_mounts([("/dev/sda1", "/", "ext4"), ("/dev/sdb1", "/data", "ext4")])
        host.set_diskstats({})
        space["/"] = (1000, 300, 250)
        space["/data"] = (0, 0, 0)

        info = collector.sample()
        assert info.count == 2
        root, data = info.disks
        assert root.device == "/dev/sda1"
        assert root.mount_point == "/"
        assert root.total == 1000 * BLOCK
        assert root.free == 300 * BLOCK
        assert root.available == 250 * BLOCK
        assert root.usage == pytest.approx(75.0)
        assert data.usage == 0.0

    def test_virtual_devices_filtered(self, host, collector, space):
        host.set_mounts(
            [
                ("/dev/loop0", "/snap/core", "squashfs"),
                ("/dev/ram0", "/ram", "ext2"),
                ("/dev/dm-0", "/crypt", "ext4"),
                ("/dev/sr0", "/media/cdrom", "iso9660"),
                ("proc", "/proc", "proc"),
                ("tmpfs", "/run", "tmpfs"),
                ("/dev/sda1", "/", "ext4"),
            ]
        )
        host.set_diskstats({})
        for mount_point in ["/snap/core", "/ram", "/crypt", "/media/cdrom", "/proc", "/run", "/"]:
            space[mount_point] = (100, 50, 50)

        info = collector.sample()
        assert [disk.mount_point for disk in info.disks] == ["/"]

    def test_non_physical_allowed_by_config(self, host, config, source, store, space):
        config["hoststat.collectors.disk"] = {"physical_only": "False", "ignore_devices": "loop"}
        host.set_mounts([("tmpfs", "/run", "tmpfs"), ("/dev/loop1", "/snap", "squashfs")])
        space["/run"] = (100, 100, 100)
        space["/snap"] = (100, 0, 0)

        info = DISK(config, source, store).sample()
        assert [disk.device for disk in info.disks] == ["tmpfs"]

    def test_first_observation_reports_zero_io(self, host, collector, space):
        host.set_mounts([("/dev/sda1", "/", "ext4")])
        host.set_diskstats({"sda": (123456, 654321, 2), "sda1": (100, 200, 0)})
        space["/"] = (100, 50, 50)

        disk = collector.sample().disks[0]
        assert disk.reads == 0
        assert disk.writes == 0
        assert disk.io_in_progress == 2

    def test_io_deltas_use_parent_disk(self, host, collector, space):
        host.set_mounts([("/dev/sda1", "/", "ext4")])
        space["/"] = (100, 50, 50)
        host.set_diskstats({"sda": (1000, 2000, 0)})
        collector.sample()

        host.set_diskstats({"sda": (1150, 2030, 1)})
        disk = collector.sample().disks[0]
        assert disk.reads == 150
        assert disk.writes == 30
        assert disk.io_in_progress == 1

    def test_counter_reset_clamps_to_zero(self, host, collector, space):
        host.set_mounts([("/dev/sda1", "/", "ext4")])
        space["/"] = (100, 50, 50)
        host.set_diskstats({"sda": (1000, 2000, 0)})
        collector.sample()

        host.set_diskstats({"sda": (10, 20, 0)})
        disk = collector.sample().disks[0]
        assert (disk.reads, disk.writes) == (0, 0)

        host.set_diskstats({"sda": (15, 28, 0)})
        disk = collector.sample().disks[0]
        assert (disk.reads, disk.writes) == (5, 8)

    def test_baseline_follows_device_not_position(self, host, collector, space):
        space["/"] = (100, 50, 50)
        space["/data"] = (100, 50, 50)
        host.set_mounts([("/dev/sda1", "/", "ext4"), ("/dev/sdb1", "/data", "ext4")])
        host.set_diskstats({"sda": (1000, 1000, 0), "sdb": (50, 50, 0)})
        collector.sample()

        # sda unmounted: sdb moves to the first position
        host.set_mounts([("/dev/sdb1", "/data", "ext4")])
        host.set_diskstats({"sda": (1000, 1000, 0), "sdb": (60, 70, 0)})
        disk = collector.sample().disks[0]
        assert disk.device == "/dev/sdb1"
        assert (disk.reads, disk.writes) == (10, 20)

    def test_remounted_device_starts_over(self, host, collector, space):
        space["/"] = (100, 50, 50)
        space["/usb"] = (100, 50, 50)
        host.set_mounts([("/dev/sda1", "/", "ext4"), ("/dev/sdc1", "/usb", "vfat")])
        host.set_diskstats({"sda": (1, 1, 0), "sdc": (100, 100, 0)})
        collector.sample()

        host.set_mounts([("/dev/sda1", "/", "ext4")])
        collector.sample()

        host.set_mounts([("/dev/sda1", "/", "ext4"), ("/dev/sdc1", "/usb", "vfat")])
        host.set_diskstats({"sda": (1, 1, 0), "sdc": (900, 900, 0)})
        usb = collector.sample().disks[1]
        assert (usb.reads, usb.writes) == (0, 0)

    def test_partitions_share_parent_delta(self, host, collector, space):
        space["/"] = (100, 50, 50)
        space["/home"] = (100, 50, 50)
        host.set_mounts([("/dev/nvme0n1p1", "/", "ext4"), ("/dev/nvme0n1p2", "/home", "ext4")])
        host.set_diskstats({"nvme0n1": (100, 100, 0)})
        collector.sample()

        host.set_diskstats({"nvme0n1": (140, 110, 0)})
        root, home = collector.sample().disks
        assert (root.reads, root.writes) == (40, 10)
        assert (home.reads, home.writes) == (40, 10)

    def test_missing_io_line_is_not_fatal(self, host, collector, space):
        host.set_mounts([("/dev/vda1", "/", "ext4")])
        host.set_diskstats({"sda": (1, 1, 1)})
        space["/"] = (100, 50, 50)

        disk = collector.sample().disks[0]
        assert (disk.reads, disk.writes, disk.io_in_progress) == (0, 0, 0)

    def test_missing_diskstats_is_not_fatal(self, host, collector, space):
        host.set_mounts([("/dev/sda1", "/", "ext4")])
        space["/"] = (1000, 500, 250)

        info = collector.sample()
        assert info.disks[0].usage == pytest.approx(75.0)
        assert info.disks[0].reads == 0

    def test_unreadable_mount_skipped(self, host, collector, space):
        host.set_mounts([("/dev/sda1", "/", "ext4"), ("/dev/sdb1", "/gone", "ext4")])
        host.set_diskstats({})
        space["/"] = (100, 50, 50)

        info = collector.sample()
        assert [disk.mount_point for disk in info.disks] == ["/"]

    def test_missing_mount_table(self, collector):
        with pytest.raises(SourceUnavailable):
            collector.sample()

    def test_truncated(self, host, collector, space):
        mounts = [(f"/dev/sd{chr(ord('a') + i)}1", f"/mnt/{i}", "ext4") for i in range(MAX_DISKS + 2)]
        host.set_mounts(mounts)
        host.set_diskstats({})
        for _, mount_point, _ in mounts:
            space[mount_point] = (100, 50, 50)

        info = collector.sample()
        assert info.count == MAX_DISKS
        assert info.truncated is True
        assert info.disks[-1].mount_point == f"/mnt/{MAX_DISKS - 1}"

    def test_not_truncated(self, host, collector, space):
        host.set_mounts([("/dev/sda1", "/", "ext4")])
        host.set_diskstats({})
        space["/"] = (100, 50, 50)
        assert collector.sample().truncated is False

    def test_escaped_mount_point(self, host, collector, space):
        host.write("mtab", "/dev/sdb1 /media/my\\040disk ext4 rw 0 0\n")
        host.set_diskstats({})
        space["/media/my disk"] = (10, 5, 5)
        assert collector.sample().disks[0].mount_point == "/media/my disk"

    def test_undecodable_mount_point(self, host, collector, space):
        host.mtab.write_bytes(b"/dev/sda1 / ext4 rw 0 0\n/dev/sdb1 /media/caf\xe9 ext4 rw 0 0\n")
        host.set_diskstats({"sdb": (7, 8, 0)})
        space["/"] = (100, 50, 50)
        space["/media/caf\udce9"] = (10, 5, 5)

        info = collector.sample()
        assert info.count == 2
        media = info.disks[1]
        assert media.device == "/dev/sdb1"
        assert os.fsencode(media.mount_point) == b"/media/caf\xe9"
        assert media.usage == pytest.approx(50.0)
