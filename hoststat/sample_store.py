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

"""Previous-sample storage

Holds the most recent raw counters observed for every tracked entity, keyed
by (subsystem, identity key). Each subsystem counts its own polls: a stored
sample is only handed back as a baseline when it was written during the
poll immediately preceding the current one, so an entity that vanished for
a cycle starts over with a zero delta when it returns.

Slots are created on first observation and never removed.
"""

from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Tuple


@dataclass(frozen=True)
class Sample:
    values: Tuple[int, ...]
    timestamp: Optional[float] = None
    poll: int = 0


class SampleStore:
    def __init__(self):
        self.__slots: Dict[Tuple[str, Hashable], Sample] = {}
        self.__polls: Dict[str, int] = {}

    def begin(self, subsystem: str) -> int:
        """Start a new poll for subsystem and return its sequence number."""
        self.__polls[subsystem] = self.__polls.get(subsystem, 0) + 1
        return self.__polls[subsystem]

    def previous(self, subsystem: str, key: Hashable) -> Optional[Sample]:
        """Return the baseline for key, or None when it is not usable."""
        sample = self.__slots.get((subsystem, key))
        if sample is None:
            return None
        if sample.poll != self.__polls.get(subsystem, 0) - 1:
            return None
        return sample

    def update(self, subsystem: str, key: Hashable, values, timestamp: Optional[float] = None):
        self.__slots[(subsystem, key)] = Sample(
            values=tuple(values), timestamp=timestamp, poll=self.__polls.get(subsystem, 0)
        )

    def keys(self, subsystem: str):
        return [key for (owner, key) in self.__slots if owner == subsystem]

    def __len__(self):
        return len(self.__slots)
