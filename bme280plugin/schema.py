"""
Graph definitions handed to the monitoring agent.

Two naming profiles exist:

    qualified  - keys look like "temperature.BME280.value", graphs are
                 wildcard groups ("temperature.#") so every sensor model gets
                 its own line on the same graph.
    flat       - keys are the bare field name ("temperature") under a plain
                 graph of the same name. One climate sensor only.

Every key the collector emits must be covered by the profile's graphs.
"""

import re
from typing import Dict, List

from pydantic import BaseModel, ConfigDict

WILDCARDS = ("#", "*")
SEGMENT_RE = "[-a-zA-Z0-9_]+"


class Metric(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    diff: bool = False     # report per-minute delta instead of the raw value
    stacked: bool = False


class Graph(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    unit: str  # "float" or "integer"
    metrics: List[Metric]


class Profile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    qualified: bool
    devices: List[str]     # driver names, see board.DRIVERS
    graphs: Dict[str, Graph]

    def key(self, category: str, model: str, field: str = "value") -> str:
        """Snapshot key for one reading."""
        if self.qualified:
            return f"{category}.{model}.{field}"
        return category if field == "value" else field


QUALIFIED_GRAPHS = {
    "temperature.#": Graph(
        label="Temperature (C)",
        unit="float",
        metrics=[Metric(name="value", label="Temperature")],
    ),
    "pressure.#": Graph(
        label="Pressure (hPa)",
        unit="float",
        metrics=[Metric(name="value", label="Pressure")],
    ),
    "humidity.#": Graph(
        label="Humidity (%)",
        unit="float",
        metrics=[Metric(name="value", label="Humidity")],
    ),
    "abs_humidity.#": Graph(
        label="Absolute Humidity (g/m^3)",
        unit="float",
        metrics=[Metric(name="value", label="Absolute Humidity")],
    ),
    "raw_illum.#": Graph(
        label="Illuminance (raw value)",
        unit="integer",
        metrics=[
            Metric(name="broadband", label="Broadband light"),
            Metric(name="infrared", label="Infrared light"),
        ],
    ),
    "illuminance.#": Graph(
        label="Illuminance (lux)",
        unit="integer",
        metrics=[Metric(name="value", label="Illuminance")],
    ),
}

FLAT_GRAPHS = {
    "temperature": Graph(
        label="Temperature (C)",
        unit="float",
        metrics=[Metric(name="temperature", label="Temperature")],
    ),
    "pressure": Graph(
        label="Pressure (hPa)",
        unit="float",
        metrics=[Metric(name="pressure", label="Pressure")],
    ),
    "humidity": Graph(
        label="Humidity (%)",
        unit="float",
        metrics=[Metric(name="humidity", label="Humidity")],
    ),
    "abs_humidity": Graph(
        label="Absolute Humidity (g/m^3)",
        unit="float",
        metrics=[Metric(name="abs_humidity", label="Absolute Humidity")],
    ),
}

PROFILES = {
    "qualified": Profile(
        name="qualified",
        qualified=True,
        devices=["bme280", "sht2x", "tsl2561"],
        graphs=QUALIFIED_GRAPHS,
    ),
    "flat": Profile(
        name="flat",
        qualified=False,
        devices=["bme280"],
        graphs=FLAT_GRAPHS,
    ),
}

DEFAULT_PROFILE = "qualified"


def is_wildcard(graph_name: str) -> bool:
    return any(w in graph_name for w in WILDCARDS)


def metric_pattern(graph_name: str, metric_name: str) -> "re.Pattern":
    """Regex matching the snapshot keys of one metric in a wildcard graph."""
    parts = [SEGMENT_RE if p in WILDCARDS else re.escape(p) for p in graph_name.split(".")]
    return re.compile("^" + r"\.".join(parts + [re.escape(metric_name)]) + "$")


def find_metric(graphs: Dict[str, Graph], key: str):
    """Return (graph name, Metric) declaring snapshot `key`, or None."""
    for graph_name, graph in graphs.items():
        for metric in graph.metrics:
            if is_wildcard(graph_name):
                if metric_pattern(graph_name, metric.name).match(key):
                    return graph_name, metric
            elif metric.name == key:
                return graph_name, metric
    return None


def is_declared(graphs: Dict[str, Graph], key: str) -> bool:
    return find_metric(graphs, key) is not None
