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

"""GPU monitoring

Two interchangeable backends provide per-device GPU data:

NVMLBackend   NVIDIA Management Library via pynvml. Full metrics: name,
              temperature, utilization, memory, power and fan speed.
SysfsBackend  Generic enumeration of /sys/class/drm/card<N>. Only the device
              name is available and every device is tagged supported=False.

The backend is chosen once when the collector is created and never changes
afterwards: if NVML cannot be bound at startup, a driver appearing later is
not picked up. At most MAX_GPUS devices are reported.
"""

import configparser
import logging
from abc import ABC, abstractmethod
from typing import List, Set, Tuple

import pynvml

from hoststat.collector_base import Collector
from hoststat.errors import BackendUnavailable
from hoststat.models import GPUInfo, GPUStats
from hoststat.sample_store import SampleStore
from hoststat.sources import CounterSource

MAX_GPUS = 4

# Library entry points that must all resolve for NVML to be usable
NVML_ENTRY_POINTS = (
    "nvmlInit_v2",
    "nvmlShutdown",
    "nvmlDeviceGetCount_v2",
    "nvmlDeviceGetHandleByIndex_v2",
    "nvmlDeviceGetName",
    "nvmlDeviceGetTemperature",
    "nvmlDeviceGetUtilizationRates",
    "nvmlDeviceGetMemoryInfo",
    "nvmlDeviceGetPowerUsage",
    "nvmlDeviceGetFanSpeed",
)


class GPUBackend(ABC):
    name = "none"

    @abstractmethod
    def probe(self, limit: int) -> GPUInfo:
        """Enumerate up to limit devices and return their current state."""
        pass

    def shutdown(self):
        return


class SysfsBackend(GPUBackend):
    name = "sysfs"

    def __init__(self, source: CounterSource):
        self.__source = source

    def probe(self, limit: int) -> GPUInfo:
        cards = self.__source.read_drm_cards()
        gpus = []
        for index, device in cards[:limit]:
            name = self.__source.read_drm_name(device) or "Unknown GPU"
            gpus.append(GPUStats(index=index, name=name, supported=False))
        return GPUInfo(gpus=tuple(gpus), backend=self.name, truncated=len(cards) > limit)


class NVMLBackend(GPUBackend):
    name = "nvml"

    def __init__(self, source: CounterSource, nvml=None):
        self.__nvml = nvml if nvml is not None else pynvml
        self.__bound = False
        self.__sysfs = SysfsBackend(source)
        self.__warned: Set[Tuple[int, str]] = set()
        self.__warned_count = False

    @property
    def bound(self) -> bool:
        return self.__bound

    def bind(self):
        """Initialize NVML and verify every required entry point resolves.

        Raises:
            BackendUnavailable: library missing, init failure or missing symbol.
        """
        nvml = self.__nvml
        try:
            nvml.nvmlInit()
        except nvml.NVMLError as e:
            raise BackendUnavailable(f"NVML initialization failed: {e}") from e
        self.__bound = True

        missing = []
        for symbol in NVML_ENTRY_POINTS:
            try:
                nvml._nvmlGetFunctionPointer(symbol)
            except nvml.NVMLError:
                missing.append(symbol)
        if missing:
            self.shutdown()
            raise BackendUnavailable(f"NVML entry points not found: {', '.join(missing)}")

    def shutdown(self):
        if not self.__bound:
            return
        self.__bound = False
        try:
            self.__nvml.nvmlShutdown()
        except self.__nvml.NVMLError as e:
            logging.debug(f"NVML shutdown failed: {e}")

    def __query(self, index: int, field: str, func, *args):
        """Run one per-device query; failures leave the field at its default."""
        try:
            return func(*args)
        except self.__nvml.NVMLError as e:
            if (index, field) not in self.__warned:
                self.__warned.add((index, field))
                logging.debug(f"GPU {index}: unable to query {field}: {e}")
            return None

    def __device(self, index: int) -> GPUStats:
        nvml = self.__nvml
        handle = self.__query(index, "handle", nvml.nvmlDeviceGetHandleByIndex, index)
        if handle is None:
            return GPUStats(index=index, name="Unknown GPU", supported=True)

        name = self.__query(index, "name", nvml.nvmlDeviceGetName, handle) or "Unknown GPU"
        if isinstance(name, bytes):
            name = name.decode("utf-8", errors="replace")

        temperature = self.__query(index, "temperature", nvml.nvmlDeviceGetTemperature, handle, nvml.NVML_TEMPERATURE_GPU)
        utilization = self.__query(index, "utilization", nvml.nvmlDeviceGetUtilizationRates, handle)
        memory = self.__query(index, "memory", nvml.nvmlDeviceGetMemoryInfo, handle)
        power = self.__query(index, "power", nvml.nvmlDeviceGetPowerUsage, handle)
        fan = self.__query(index, "fan", nvml.nvmlDeviceGetFanSpeed, handle)

        return GPUStats(
            index=index,
            name=name,
            temperature=int(temperature or 0),
            utilization=float(utilization.gpu) if utilization is not None else 0.0,
            memory_total=int(memory.total) if memory is not None else 0,
            memory_used=int(memory.used) if memory is not None else 0,
            memory_free=int(memory.free) if memory is not None else 0,
            power_usage=int(power or 0),
            fan_speed=int(fan or 0),
            supported=True,
        )

    def probe(self, limit: int) -> GPUInfo:
        try:
            count = self.__nvml.nvmlDeviceGetCount()
        except self.__nvml.NVMLError as e:
            # device count unavailable this poll: enumerate through sysfs instead
            if not self.__warned_count:
                self.__warned_count = True
                logging.warning(f"NVML device count query failed, using sysfs enumeration: {e}")
            return self.__sysfs.probe(limit)
        self.__warned_count = False

        gpus = [self.__device(index) for index in range(min(count, limit))]
        return GPUInfo(gpus=tuple(gpus), backend=self.name, nvidia_available=True, truncated=count > limit)


def select_backend(config: configparser.ConfigParser, source: CounterSource) -> GPUBackend:
    """Bind the vendor backend when possible, else fall back to sysfs."""
    if config.getboolean("hoststat.collectors.gpu", "enable_nvml", fallback=True):
        backend = NVMLBackend(source)
        try:
            backend.bind()
            logging.info("--> GPU backend: NVML")
            return backend
        except BackendUnavailable as e:
            logging.info(f"--> NVML backend unavailable ({e})")
    else:
        logging.info("--> NVML backend disabled via runtime config")

    logging.info("--> GPU backend: sysfs (name only)")
    return SysfsBackend(source)


class GPU(Collector):
    subsystem = "gpu"

    def __init__(self, config: configparser.ConfigParser, source: CounterSource, store: SampleStore):
        """Initialize the GPU data collector and select its backend.

        Args:
            config (configparser.ConfigParser): Cached copy of runtime configuration.
            source (CounterSource): Reader for sysfs DRM enumeration.
            store (SampleStore): Shared previous-sample storage (unused, GPU data is instantaneous).
        """
        logging.debug(f"Initializing {self.__class__.__name__} data collector")
        super().__init__(config, source, store)
        self.__backend = select_backend(config, source)
        self.__known: List[int] = []

    @property
    def backend(self) -> GPUBackend:
        return self.__backend

    def sample(self) -> GPUInfo:
        info = self.__backend.probe(MAX_GPUS)

        indices = [gpu.index for gpu in info.gpus]
        if indices != self.__known:
            logging.info(f"GPU devices changed: {self.__known} -> {indices} ({info.backend})")
            self.__known = indices
        if info.truncated:
            logging.debug(f"GPU limit ({MAX_GPUS}) reached, additional devices dropped")

        return info

    def cleanup(self):
        self.__backend.shutdown()
