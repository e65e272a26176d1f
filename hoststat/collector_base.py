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

"""Base class for hoststat data collectors.

Every collector receives the runtime configuration, the shared counter source
and the shared sample store. One call to sample() reads the source once and
returns the subsystem's portion of a MetricsSnapshot.
"""

import configparser
from abc import ABC, abstractmethod

from hoststat.sample_store import SampleStore
from hoststat.sources import CounterSource


class Collector(ABC):
    # Name used in logs, perf metrics and PartialSample errors
    subsystem = "unknown"

    def __init__(self, config: configparser.ConfigParser, source: CounterSource, store: SampleStore):
        self.config = config
        self.source = source
        self.store = store

    @abstractmethod
    def sample(self):
        """Read the source once and return the subsystem snapshot."""
        pass

    def cleanup(self):
        """Release resources held by the collector. Safe to call repeatedly."""
        return
