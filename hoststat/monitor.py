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

# Host telemetry sampler.
#
# Supporting monitor class that owns the sample store and the set of data
# collectors, and gathers one consistent MetricsSnapshot per poll.
# --

import importlib
import logging
import os
import platform
import sys
import time

from prometheus_client import CollectorRegistry, Gauge

from hoststat import utils
from hoststat.collector_definitions import COLLECTORS
from hoststat.errors import HoststatError, PartialSample
from hoststat.models import GPUInfo, MetricsSnapshot
from hoststat.sample_store import SampleStore
from hoststat.sources import CounterSource


class Monitor:
    def __init__(self, config=None, logFile=None, source=None, store=None):

        self.config = config if config is not None else utils.readConfig()

        logLevel = os.environ.get("HOSTSTAT_LOG_LEVEL", "INFO").upper()
        if logFile:
            hostname = platform.node().split(".", 1)[0]
            logging.basicConfig(
                format=f"[{hostname}: %(asctime)s] %(message)s",
                level=logLevel,
                filename=logFile,
                datefmt="%H:%M:%S",
            )
        else:
            logging.basicConfig(format="%(message)s", level=logLevel, stream=sys.stdout)

        # previous samples live for the lifetime of the monitor
        self.store = store if store is not None else SampleStore()
        self.source = source if source is not None else CounterSource.fromConfig(self.config)

        # sampler performance metrics (kept in a private registry, not exported)
        self.registry = CollectorRegistry()
        self.__subtimers = self.config.getboolean(
            "hoststat.collectors", "enable_perf_collector_subtimers", fallback=False
        )
        self.__perfMetric = Gauge(
            "hoststat_perf_runtime_seconds",
            "Time to complete one data collection sample in seconds",
            labelnames=["collector"],
            registry=self.registry,
        )

        # initialize collection of data collectors
        self.__collectors = []
        self.initCollectors()

        logging.debug("Completed collector initialization")
        return

    def initCollectors(self):
        prefix_filter = utils.PrefixFilter("   ")

        for collector in COLLECTORS:
            runtime_option = collector["runtime_option"]
            default = collector["enabled_by_default"]
            if runtime_option:
                enabled = self.config.getboolean("hoststat.collectors", runtime_option, fallback=default)
            else:
                enabled = default
            if not enabled:
                logging.info("\nSkipping disabled collector: %s" % collector["className"])
                continue

            module = importlib.import_module(collector["file"])
            cls = getattr(module, collector["className"])
            logging.info("\nInitializing collector: %s" % cls.__name__)
            logging.getLogger().addFilter(prefix_filter)
            try:
                instance = cls(self.config, self.source, self.store)
            finally:
                logging.getLogger().removeFilter(prefix_filter)
            self.__collectors.append((collector["name"], instance))

    @property
    def collectors(self):
        return [instance for _, instance in self.__collectors]

    def sample(self) -> MetricsSnapshot:
        """Run one poll cycle across all collectors.

        Returns:
            MetricsSnapshot: consistent view of every subsystem.

        Raises:
            PartialSample: a collector failed; no snapshot is produced for this cycle.
        """
        start_time_total = time.perf_counter()
        results = {"gpus": GPUInfo()}

        for name, collector in self.__collectors:
            start_time = time.perf_counter()
            try:
                results[name] = collector.sample()
            except HoststatError as e:
                logging.warning(f"Sample aborted, {collector.subsystem} collector failed: {e}")
                raise PartialSample(collector.subsystem, e) from e
            if self.__subtimers:
                elapsed_time = time.perf_counter() - start_time
                self.__perfMetric.labels(collector.subsystem).set(elapsed_time)

        elapsed_time_total = time.perf_counter() - start_time_total
        self.__perfMetric.labels("total").set(elapsed_time_total)

        return MetricsSnapshot(**results)

    def cleanup(self):
        """Release collector resources (e.g. the NVML handle). Idempotent."""
        for _, collector in self.__collectors:
            collector.cleanup()
