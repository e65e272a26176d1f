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
import importlib.resources
import logging
import os
import re


class PrefixFilter(logging.Filter):
    """Prepend a fixed prefix to every record passing through a logger."""

    def __init__(self, prefix):
        super().__init__()
        self.prefix = prefix

    def filter(self, record):
        record.msg = f"{self.prefix}{record.msg}"
        return True


def removeQuotes(string):
    if string.startswith('"') and string.endswith('"'):
        return string[1:-1]
    if string.startswith("'") and string.endswith("'"):
        return string[1:-1]
    return string


def splitList(string):
    """Split a comma separated config value into a list of non-empty entries."""
    string = removeQuotes(string.strip())
    return [item for item in re.split(r",\s*", string) if item]


def readConfig(configFile=None):
    """Load runtime configuration.

    Package defaults are read first; an optional user file (or the file named
    by HOSTSTAT_CONFIG) overrides individual settings.

    Args:
        configFile (str, optional): Path to a runtime config file.

    Returns:
        configparser.ConfigParser: Runtime configuration.
    """
    config = configparser.ConfigParser()

    defaults = importlib.resources.files("hoststat.config").joinpath("hoststat.default")
    config.read_string(defaults.read_text())

    if configFile is None:
        configFile = os.environ.get("HOSTSTAT_CONFIG")

    if configFile:
        if not os.path.isfile(configFile):
            logging.warning(f"Runtime config file {configFile} not found, using defaults")
        else:
            logging.debug(f"Reading runtime-config from {configFile}")
            config.read(configFile)

    return config


def safeDelta(current, previous):
    """Difference of two cumulative counters; resets and wraps count as 0."""
    delta = current - previous
    return delta if delta >= 0 else 0


def percentage(numerator, denominator):
    """100 * numerator / denominator clamped to [0, 100]; 0 when denominator is 0."""
    if denominator <= 0:
        return 0.0
    value = 100.0 * numerator / denominator
    return min(max(value, 0.0), 100.0)
