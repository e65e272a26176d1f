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

"""Error taxonomy for data collection

Collectors raise these exceptions when a counter source cannot be used. The
Monitor converts any of them into a PartialSample naming the collector that
failed, and the caller receives no snapshot for that cycle.
"""


class HoststatError(Exception):
    """Base class for all sampling errors."""


class SourceUnavailable(HoststatError):
    """A counter source (file or library) could not be opened at all."""

    def __init__(self, path, reason=None):
        self.path = str(path)
        self.reason = reason
        message = f"counter source unavailable: {self.path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class MalformedRecord(HoststatError):
    """A record inside an open source did not have the expected layout."""

    def __init__(self, source, record):
        self.source = str(source)
        self.record = record
        super().__init__(f"malformed record in {self.source}: {record!r}")


class BackendUnavailable(HoststatError):
    """The vendor GPU backend failed to bind."""


class PartialSample(HoststatError):
    """A poll cycle was aborted because one collector failed."""

    def __init__(self, subsystem, cause):
        self.subsystem = subsystem
        self.cause = cause
        super().__init__(f"{subsystem} sampling failed: {cause}")
