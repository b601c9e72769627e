# Copyright (c) 2026 Dawid Seredyński

# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at

#     http://www.apache.org/licenses/LICENSE-2.0

# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import json
import psutil


class StatsMap:
    """Nested statistics addressed by dotted paths, e.g. 'cache.hits'."""

    def __init__(self):
        self._stats_map = {}
        self._verbose = False

    def toJson(self) -> dict:
        return self._stats_map

    @staticmethod
    def fromJson(d: dict) -> StatsMap:
        out = StatsMap()
        out._stats_map = d
        return out

    def _parentDict(self, path: str) -> tuple[dict, str]:
        assert isinstance(path, str)
        names = path.split('.')
        current_dict = self._stats_map
        for name in names[:-1]:
            if not name in current_dict:
                if self._verbose: print(f'  creating new key: {name}')
                current_dict[name] = {}
            current_dict = current_dict[name]
        return current_dict, names[-1]

    def increaseValue(self, path: str, delta_val: int|float):
        if self._verbose: print(f'increaseValue({path}, {delta_val})')
        assert isinstance(delta_val, (int, float))
        current_dict, name = self._parentDict(path)
        if not name in current_dict:
            current_dict[name] = 0
        current_dict[name] += delta_val

    def maxValue(self, path: str, val: int|float):
        if self._verbose: print(f'maxValue({path}, {val})')
        assert isinstance(val, (int, float))
        current_dict, name = self._parentDict(path)
        if not name in current_dict or current_dict[name] < val:
            current_dict[name] = val

    def setValue(self, path: str, val: int|float):
        if self._verbose: print(f'setValue({path}, {val})')
        assert isinstance(val, (int, float))
        current_dict, name = self._parentDict(path)
        current_dict[name] = val

    def setValueObj(self, path: str, val):
        if self._verbose: print(f'setValueObj({path}, {val})')
        current_dict, name = self._parentDict(path)
        current_dict[name] = val

    def getValue(self, path: str) -> int|float:
        assert isinstance(path, str)
        names = path.split('.')
        current_dict = self._stats_map
        for name in names[:-1]:
            if not name in current_dict:
                return 0
            # else:
            current_dict = current_dict[name]
        if not names[-1] in current_dict:
            return 0
        val = current_dict[names[-1]]
        assert isinstance(val, (int, float))
        return val

    def getKeysAt(self, path: str) -> list[str]:
        assert isinstance(path, str)
        names = path.split('.')
        current_dict = self._stats_map
        for name in names:
            if not name in current_dict:
                return []
            current_dict = current_dict[name]
        return list(current_dict.keys())

    def write(self, file_path: str) -> None:
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(json.dumps(self._stats_map, indent=2, ensure_ascii=False))
            f.write('\n')


def recordMemoryUsage(sm: StatsMap, verbose: bool = False) -> None:
    rss_MiB = psutil.Process().memory_info().rss / (1024**2)
    sm.setValue('process.rss_MiB', round(rss_MiB, 2))
    if verbose:
        vm = psutil.virtual_memory()
        print('RAM usage:')
        print(f'  Total:     {vm.total / (1024**3):.2f} GiB')
        print(f'  Available: {vm.available / (1024**3):.2f} GiB')
        print(f'  Process:   {rss_MiB:.2f} MiB')
        print(f'  Percent:   {vm.percent:.1f}%')
