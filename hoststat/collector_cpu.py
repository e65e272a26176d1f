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

"""CPU utilization

Derives aggregate CPU usage from consecutive readings of the cumulative time
buckets in /proc/stat:

    usage = 100 * (1 - idle_delta / total_delta)

The first sample has no baseline and reports 0% usage.
"""

import configparser
import logging
import os

import hoststat.utils as utils
from hoststat.collector_base import Collector
from hoststat.models import CPUStats
from hoststat.sample_store import SampleStore
from hoststat.sources import CounterSource


class CPU(Collector):
    subsystem = "cpu"

    def __init__(self, config: configparser.ConfigParser, source: CounterSource, store: SampleStore):
        """Initialize the CPU data collector.

        Args:
            config (configparser.ConfigParser): Cached copy of runtime configuration.
            source (CounterSource): Reader for /proc counters.
            store (SampleStore): Shared previous-sample storage.
        """
        logging.debug(f"Initializing {self.__class__.__name__} data collector")
        super().__init__(config, source, store)
        self.__model_name = None

    def model_name(self):
        """CPU model string, looked up once and cached."""
        if self.__model_name is None:
            self.__model_name = self.source.read_cpu_model() or "Unknown CPU"
            logging.info(f"--> CPU model: {self.__model_name}")
        return self.__model_name

    def sample(self) -> CPUStats:
        model_name = self.model_name()
        cores = os.cpu_count() or 0

        self.store.begin(self.subsystem)
        idle, total = self.source.read_cpu_times()

        usage = 0.0
        previous = self.store.previous(self.subsystem, "cpu")
        if previous is not None:
            prev_idle, prev_total = previous.values
            delta_idle = utils.safeDelta(idle, prev_idle)
            delta_total = utils.safeDelta(total, prev_total)
            if delta_total > 0:
                usage = utils.percentage(delta_total - delta_idle, delta_total)

        self.store.update(self.subsystem, "cpu", (idle, total))
        return CPUStats(usage=usage, cores=cores, model_name=model_name)
