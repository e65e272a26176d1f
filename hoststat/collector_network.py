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

"""Network monitoring

Tracks per-interface traffic counters from /proc/net/dev and derives receive
and transmit throughput in bytes per second. Each interface keeps its own
baseline and timestamp, so rates stay correct when polls are late or an
interface is skipped for a cycle:

    receive_speed = (rx_bytes_now - rx_bytes_prev) / elapsed_seconds

An interface seen for the first time reports zero throughput. At most
MAX_INTERFACES interfaces are reported.
"""

import configparser
import logging
import time

import hoststat.utils as utils
from hoststat.collector_base import Collector
from hoststat.models import NetworkInterfaceStats, NetworkStats
from hoststat.sample_store import SampleStore
from hoststat.sources import CounterSource, InterfaceCounters

MAX_INTERFACES = 16


class NETWORK(Collector):
    subsystem = "network"

    def __init__(self, config: configparser.ConfigParser, source: CounterSource, store: SampleStore):
        """Initialize the NETWORK data collector.

        Args:
            config (configparser.ConfigParser): Cached copy of runtime configuration.
            source (CounterSource): Reader for /proc/net/dev.
            store (SampleStore): Shared previous-sample storage.
        """

        logging.debug("Initializing network data collector")
        super().__init__(config, source, store)

        ignored = config.get("hoststat.collectors.network", "ignore_interfaces", fallback="")
        self.__ignore_interfaces = set(utils.splitList(ignored))
        if self.__ignore_interfaces:
            logging.info(f"--> ignoring interfaces: {sorted(self.__ignore_interfaces)}")

    def __speeds(self, nic: str, counters: InterfaceCounters, now: float):
        receive_speed = send_speed = 0.0
        previous = self.store.previous(self.subsystem, nic)
        if previous is not None:
            elapsed = now - previous.timestamp
            if elapsed > 0:
                prev_rx, prev_tx = previous.values
                receive_speed = utils.safeDelta(counters.bytes_received, prev_rx) / elapsed
                send_speed = utils.safeDelta(counters.bytes_sent, prev_tx) / elapsed
        self.store.update(self.subsystem, nic, (counters.bytes_received, counters.bytes_sent), timestamp=now)
        return receive_speed, send_speed

    def sample(self) -> NetworkStats:
        self.store.begin(self.subsystem)
        records = list(self.source.read_net_dev())
        now = time.monotonic()

        interfaces = []
        truncated = False
        for nic, counters in records:
            if nic in self.__ignore_interfaces:
                continue
            if len(interfaces) >= MAX_INTERFACES:
                truncated = True
                logging.debug(f"Interface limit ({MAX_INTERFACES}) reached, dropping {nic}")
                break

            receive_speed, send_speed = self.__speeds(nic, counters, now)
            interfaces.append(
                NetworkInterfaceStats(
                    interface=nic,
                    bytes_received=counters.bytes_received,
                    bytes_sent=counters.bytes_sent,
                    packets_received=counters.packets_received,
                    packets_sent=counters.packets_sent,
                    errors_in=counters.errors_in,
                    errors_out=counters.errors_out,
                    drops_in=counters.drops_in,
                    drops_out=counters.drops_out,
                    receive_speed=receive_speed,
                    send_speed=send_speed,
                )
            )

        return NetworkStats(interfaces=tuple(interfaces), truncated=truncated)
