"""
Mackerel agent plugin protocol.

Normal run prints one line per metric:

    bme280.temperature.BME280.value\t23.450000\t1700000000

With MACKEREL_AGENT_PLUGIN_META=1 the agent asks for graph definitions
instead, which are printed as a JSON document after a marker line.
"""

import json
import logging
import os
import sys
import tempfile
import time
from typing import Dict, Optional

from .collector import Collector
from .schema import Graph, find_metric, is_wildcard

DEFAULT_PREFIX = "bme280"
META_ENV = "MACKEREL_AGENT_PLUGIN_META"
META_MARKER = "# mackerel-agent-plugin"
LAST_TIME_KEY = "_lastTime"
# diff values older than this are not trusted
MAX_DIFF_AGE = 600

logger = logging.getLogger(__name__)


class MackerelPlugin:
    def __init__(self, collector: Collector, graphs: Dict[str, Graph],
                 prefix: str = DEFAULT_PREFIX, tempfile_path: Optional[str] = None,
                 out=None):
        self.collector = collector
        self.graphs = graphs
        self.prefix = prefix
        self.tempfile_path = tempfile_path
        self.out = out or sys.stdout

    def metric_key_prefix(self) -> str:
        return self.prefix or DEFAULT_PREFIX

    def tempfile_name(self) -> str:
        if self.tempfile_path:
            return self.tempfile_path
        return os.path.join(tempfile.gettempdir(), f"mackerel-plugin-{self.metric_key_prefix()}")

    def _print(self, line: str) -> None:
        print(line, file=self.out)

    def output_definitions(self) -> None:
        prefix = self.metric_key_prefix()
        title = prefix.title()
        graphs = {}
        for name, graph in self.graphs.items():
            full_name = f"{prefix}.{name}" if name else prefix
            graphs[full_name] = {
                "label": f"{title} {graph.label}",
                "unit": graph.unit,
                "metrics": [
                    {"name": m.name, "label": m.label, "stacked": m.stacked}
                    for m in graph.metrics
                ],
            }
        self._print(META_MARKER)
        self._print(json.dumps({"graphs": graphs}))

    def load_last_values(self) -> Dict[str, float]:
        """Values saved by the previous run, or {} when there are none."""
        path = self.tempfile_name()
        if not os.path.exists(path):
            return {}
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable tempfile {path}: {e}")
            return {}

    def save_values(self, snapshot: Dict[str, float], now: float) -> None:
        values = dict(snapshot)
        values[LAST_TIME_KEY] = int(now)
        path = self.tempfile_name()
        try:
            with open(path, "w") as f:
                json.dump(values, f)
        except IOError as e:
            raise RuntimeError(f"Failed to save values to {path}: {e}")

    def _diff(self, key: str, value: float, last: Dict[str, float], now: float) -> Optional[float]:
        if key not in last or LAST_TIME_KEY not in last:
            return None
        elapsed = int(now) - last[LAST_TIME_KEY]
        if elapsed <= 0 or elapsed > MAX_DIFF_AGE:
            return None
        delta = value - last[key]
        if delta < 0:
            logger.info(f"{key}: counter went backwards, skipping")
            return None
        return delta * 60.0 / elapsed

    def output_values(self, snapshot: Dict[str, float], now: float) -> None:
        prefix = self.metric_key_prefix()
        last = None
        for key in sorted(snapshot):
            found = find_metric(self.graphs, key)
            if found is None:
                logger.warning(f"Metric {key} is not declared in any graph, skipping")
                continue
            graph_name, metric = found
            value = snapshot[key]
            if metric.diff:
                if last is None:
                    last = self.load_last_values()
                value = self._diff(key, value, last, now)
                if value is None:
                    continue
            if is_wildcard(graph_name):
                name = f"{prefix}.{key}"
            else:
                name = f"{prefix}.{graph_name}.{metric.name}"
            self._print(f"{name}\t{value:f}\t{int(now)}")

    def run(self) -> None:
        """One agent invocation. Raises CollectionError if the cycle fails."""
        if os.environ.get(META_ENV, "") == "1":
            self.output_definitions()
            return
        snapshot = self.collector.fetch_metrics()
        now = time.time()
        self.output_values(snapshot, now)
        self.save_values(snapshot, now)
