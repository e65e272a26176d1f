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

"""Memory usage

Stateless reader for /proc/meminfo. Cache accounting follows free(1):

    cached = Cached + SReclaimable - Shmem
    used   = MemTotal - MemFree - Buffers - cached
"""

import configparser
import logging

import hoststat.utils as utils
from hoststat.collector_base import Collector
from hoststat.errors import MalformedRecord
from hoststat.models import MemoryStats
from hoststat.sample_store import SampleStore
from hoststat.sources import CounterSource


class MEMORY(Collector):
    subsystem = "memory"

    def __init__(self, config: configparser.ConfigParser, source: CounterSource, store: SampleStore):
        logging.debug(f"Initializing {self.__class__.__name__} data collector")
        super().__init__(config, source, store)

    def sample(self) -> MemoryStats:
        meminfo = self.source.read_meminfo()
        if "MemTotal" not in meminfo:
            raise MalformedRecord(self.source.proc_path / "meminfo", "MemTotal")

        total = meminfo["MemTotal"]
        free = meminfo.get("MemFree", 0)
        buffers = meminfo.get("Buffers", 0)
        cached = meminfo.get("Cached", 0) + meminfo.get("SReclaimable", 0) - meminfo.get("Shmem", 0)
        cached = max(cached, 0)
        used = max(total - free - buffers - cached, 0)

        swap_total = meminfo.get("SwapTotal", 0)
        swap_free = meminfo.get("SwapFree", 0)
        swap_usage = 0.0
        if swap_total > 0:
            swap_usage = utils.percentage(swap_total - swap_free, swap_total)

        return MemoryStats(
            total=total,
            free=free,
            available=meminfo.get("MemAvailable", 0),
            used=used,
            buffers=buffers,
            cached=cached,
            swap_total=swap_total,
            swap_free=swap_free,
            usage=utils.percentage(used, total),
            swap_usage=swap_usage,
        )
