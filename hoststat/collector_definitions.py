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
# hoststat data collector definitions (metadata to support dynamic loading)
#
# Collectors are sampled in list order. Entries without a runtime_option are
# always enabled.

COLLECTORS = [
    {
        "name": "cpu",
        "runtime_option": None,
        "enabled_by_default": True,
        "file": "hoststat.collector_cpu",
        "className": "CPU",
    },
    {
        "name": "memory",
        "runtime_option": None,
        "enabled_by_default": True,
        "file": "hoststat.collector_memory",
        "className": "MEMORY",
    },
    {
        "name": "disks",
        "runtime_option": None,
        "enabled_by_default": True,
        "file": "hoststat.collector_disk",
        "className": "DISK",
    },
    {
        "name": "network",
        "runtime_option": None,
        "enabled_by_default": True,
        "file": "hoststat.collector_network",
        "className": "NETWORK",
    },
    {
        "name": "gpus",
        "runtime_option": "enable_gpu",
        "enabled_by_default": True,
        "file": "hoststat.collector_gpu",
        "className": "GPU",
    },
]
