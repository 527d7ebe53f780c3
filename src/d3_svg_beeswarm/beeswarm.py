"""Beeswarm chart of per-country suicide statistics.

Circles sit on a horizontal linear or log scale of either total deaths or
deaths per capita; a collision force keeps them from overlapping. All UI
interaction goes through ``BeeswarmChart.handle_event``.

Example
-------
>>> chart = BeeswarmChart.from_source("who_suicide_stats.csv")
>>> chart.handle_event(ChartEvent(EventKind.SCALE_CHANGED, ScaleKind.LOGARITHMIC))
>>> chart.handle_event(ChartEvent(EventKind.FILTER_CHANGED, ["asia", "europe"]))
>>> chart.save("beeswarm.svg")
"""
import html
import io
import logging
import os
from dataclasses import dataclass
from enum import Enum

import pandas as pd
import requests
from lxml import etree

from . import axis_bottom, extent, format_number, MiniD3SVG, scale_linear, scale_log, scale_ordinal
from .force import resolve_collisions

logger = logging.getLogger(__name__)

DEFAULT_DATA_URL = "https://martinheinz.github.io/charts/data/who_suicide_stats.csv"
DATA_URL_ENV = "BEESWARM_DATA_URL"

CONTINENTS = ("asia", "africa", "northAmerica", "europe", "southAmerica", "oceania")
CONTINENT_PALETTE = ("#D81B60", "#1976D2", "#388E3C", "#FBC02D", "#E64A19", "#455A64")
REQUIRED_COLUMNS = ("country", "continent", "total", "perCapita")

XHTML_NS = "http://www.w3.org/1999/xhtml"

_TOOLTIP_CSS = (
    ".tooltip div { font: 12px Helvetica, sans-serif; background: #fff; "
    "border: 1px solid rgb(96,125,139); padding: 4px 6px; }"
)


class DatasetLoadError(RuntimeError):
    """The source dataset could not be fetched or parsed."""


class Metric(str, Enum):
    TOTAL = "total"
    PER_CAPITA = "perCapita"

    @property
    def label(self):
        return "Total Deaths" if self is Metric.TOTAL else "Per Capita Deaths"

    @property
    def tick_specifier(self):
        return ",.1f" if self is Metric.PER_CAPITA else ".0s"


class ScaleKind(str, Enum):
    LINEAR = "linear"
    LOGARITHMIC = "logarithmic"


class EventKind(Enum):
    METRIC_CHANGED = "metric"
    SCALE_CHANGED = "scale"
    FILTER_CHANGED = "filter"


@dataclass(frozen=True)
class ChartEvent:
    kind: EventKind
    value: object


@dataclass(frozen=True)
class DataPoint:
    country: str
    continent: str
    total: float
    per_capita: float

    def value(self, metric):
        return self.total if Metric(metric) is Metric.TOTAL else self.per_capita


@dataclass
class ChartState:
    metric: Metric = Metric.TOTAL
    scale_kind: ScaleKind = ScaleKind.LINEAR
    legend: str = Metric.TOTAL.label
    continents: tuple = CONTINENTS


def data_url():
    return os.getenv(DATA_URL_ENV, DEFAULT_DATA_URL)


def parse_records(rows):
    """Turn raw rows (DataFrame or iterable of mappings) into DataPoints.

    Numeric columns are coerced; unparseable values become NaN and the point
    is kept.
    """
    frame = rows if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))
    if frame.empty and not len(frame.columns):
        return ()
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        logger.error("dataset is missing required columns: %s", ", ".join(missing))
        raise DatasetLoadError(f"dataset is missing required columns: {', '.join(missing)}")

    numeric = {}
    for col in ("total", "perCapita"):
        raw = frame[col]
        numeric[col] = pd.to_numeric(raw, errors="coerce")
        bad = int((numeric[col].isna() & raw.notna()).sum())
        if bad:
            logger.warning("%d value(s) in column %r are not numeric; using NaN", bad, col)

    return tuple(
        DataPoint(
            country=str(country),
            continent=str(continent),
            total=float(total),
            per_capita=float(per_capita),
        )
        for country, continent, total, per_capita in zip(
            frame["country"], frame["continent"], numeric["total"], numeric["perCapita"]
        )
    )


def load_dataset(source=None, timeout=30):
    """Load the statistics table from a URL or a local CSV path."""
    source = source or data_url()
    try:
        if str(source).startswith(("http://", "https://")):
            resp = requests.get(source, timeout=timeout)
            resp.raise_for_status()
            frame = pd.read_csv(io.StringIO(resp.text), dtype=str)
        else:
            frame = pd.read_csv(source, dtype=str)
    except (
        requests.RequestException,
        OSError,
        UnicodeDecodeError,
        pd.errors.ParserError,
        pd.errors.EmptyDataError,
    ) as exc:
        logger.error("failed to load dataset from %s: %s", source, exc)
        raise DatasetLoadError(f"could not load dataset from {source}") from exc
    points = parse_records(frame)
    logger.info("loaded %d records from %s", len(points), source)
    return points


def filter_by_continents(points, continents):
    """Points whose continent is checked, grouped in checkbox order.

    No checked continent means no points.
    """
    selected = []
    for continent in dict.fromkeys(continents):
        selected.extend(p for p in points if p.continent == continent)
    return selected


def _normalize_margin(margin):
    def _to_float(val):
        try:
            return float(val)
        except (TypeError, ValueError):
            return 0.0

    if margin is None:
        return {"top": 0.0, "right": 40.0, "bottom": 34.0, "left": 40.0}
    if isinstance(margin, dict):
        return {
            side: _to_float(margin.get(side, 0))
            for side in ("top", "right", "bottom", "left")
        }
    if isinstance(margin, (int, float)):
        val = _to_float(margin)
        return {"top": val, "right": val, "bottom": val, "left": val}
    if isinstance(margin, (list, tuple)) and len(margin) == 4:
        top, right, bottom, left = (_to_float(m) for m in margin)
        return {"top": top, "right": right, "bottom": bottom, "left": left}
    raise ValueError("margin must be a number, a 4-tuple (top, right, bottom, left) or a dict")


def _country_key(positioned):
    return positioned.datum.country


class BeeswarmChart:
    """Owns the chart state, the SVG document and the redraw pipeline."""

    def __init__(
        self,
        points,
        width=1000,
        height=400,
        margin=None,
        radius=6,
        collide_radius=9,
        x_strength=2.0,
        palette=CONTINENT_PALETTE,
        bg=None,
        update_duration=2000,
        exit_duration=1000,
        axis_duration=1000,
    ):
        self.points = tuple(points)
        self.state = ChartState()
        self.working = list(self.points)
        self.width = width
        self.height = height
        self.margin = _normalize_margin(margin)
        self.radius = radius
        self.collide_radius = collide_radius
        self.x_strength = x_strength
        self.update_duration = update_duration
        self.exit_duration = exit_duration
        self.axis_duration = axis_duration
        self.colors = scale_ordinal(CONTINENTS, palette)
        self.baseline = height / 2 - self.margin["bottom"] / 2
        self.x_scale = None
        self.positions = []
        self.tooltip_html = ""

        self.svg = MiniD3SVG(width=width, height=height, bg=bg)
        self.svg.add_style(_TOOLTIP_CSS)
        self.guide = self.svg.append(
            "line",
            stroke="rgb(96,125,139)",
            stroke_dasharray="1,2",
            opacity=0,
            **{"class": "guide"},
        )
        self.axis_group = self.svg.append(
            "g",
            transform=f"translate(0,{height - self.margin['bottom']})",
            **{"class": "x axis"},
        )
        self.legend = self.svg.append(
            "text",
            x=width / 2,
            y=height - 2,
            font_size=11,
            font_family="Helvetica",
            **{"class": "legend"},
        )
        self.layer = self.svg.append("g", **{"class": "country-visuals"})
        self.tooltip = self.svg.append(
            "foreignObject", width=240, height=60, opacity=0, **{"class": "tooltip"}
        )

        self._handlers = {
            EventKind.METRIC_CHANGED: self._on_metric_changed,
            EventKind.SCALE_CHANGED: self._on_scale_changed,
            EventKind.FILTER_CHANGED: self._on_filter_changed,
        }
        self.redraw()

    @classmethod
    def from_source(cls, source=None, timeout=30, **kwargs):
        return cls(load_dataset(source, timeout=timeout), **kwargs)

    # ------------------------------------------------------------------
    # events
    def handle_event(self, event):
        handler = self._handlers.get(event.kind)
        if handler is None:
            raise ValueError(f"Unknown chart event: {event.kind!r}")
        value = event.value
        if event.kind is EventKind.FILTER_CHANGED:
            # a single continent name, not an iterable of characters
            value = [value] if isinstance(value, str) else list(value)
        logger.info("chart_event: %s", {"event": event.kind.value, "value": value})
        handler(value)
        self.redraw()
        return self

    def select_metric(self, metric):
        return self.handle_event(ChartEvent(EventKind.METRIC_CHANGED, metric))

    def select_scale(self, scale_kind):
        return self.handle_event(ChartEvent(EventKind.SCALE_CHANGED, scale_kind))

    def set_continents(self, continents):
        return self.handle_event(ChartEvent(EventKind.FILTER_CHANGED, continents))

    def _on_metric_changed(self, value):
        metric = Metric(value)
        self.state.metric = metric
        self.state.legend = metric.label

    def _on_scale_changed(self, value):
        self.state.scale_kind = ScaleKind(value)

    def _on_filter_changed(self, continents):
        self.state.continents = tuple(dict.fromkeys(continents))
        self.working = filter_by_continents(self.points, self.state.continents)

    # ------------------------------------------------------------------
    # redraw pipeline
    def build_scale(self):
        """Fresh x scale over the working dataset's range of the active metric."""
        metric = self.state.metric
        values = [p.value(metric) for p in self.working]
        factory = scale_log if self.state.scale_kind is ScaleKind.LOGARITHMIC else scale_linear
        scale = factory(
            domain=extent(values),
            range_=(self.margin["left"], self.width - self.margin["right"]),
        )
        if self.state.scale_kind is ScaleKind.LOGARITHMIC and any(v <= 0 for v in values):
            logger.warning(
                "log scale over %s includes values <= 0; affected circles get no valid position",
                metric.value,
            )
        return scale

    def redraw(self):
        metric = self.state.metric
        self.x_scale = self.build_scale()

        axis = axis_bottom(self.x_scale) \
            .ticks(10, metric.tick_specifier) \
            .tick_size_outer(0) \
            .duration(self.axis_duration)
        self.axis_group.call(axis)

        targets = [self.x_scale(p.value(metric)) for p in self.working]
        self.positions = resolve_collisions(
            self.working,
            targets,
            self.collide_radius,
            y=self.baseline,
            x_strength=self.x_strength,
        )

        circles = self.layer.select_all(".countries").data(self.positions, key=_country_key)

        circles.exit().transition(self.exit_duration) \
            .attr("cx", 0) \
            .attr("cy", self.baseline) \
            .remove()

        entered = circles.enter().append("circle", **{"class": "countries"}).attrs(
            cx=0,
            cy=self.baseline,
            r=self.radius,
            fill=lambda d, *_: self.colors(d.datum.continent),
        )
        entered.merge(circles).transition(self.update_duration) \
            .attr("cx", lambda d, *_: d.x) \
            .attr("cy", lambda d, *_: d.y)

        self.legend.text(self.state.legend)

        self.layer.select_all(".countries") \
            .on("mousemove", self._show_tooltip) \
            .on("mouseout", self._hide_tooltip)

        logger.debug(
            "redraw: metric=%s scale=%s points=%d entered=%d exiting=%d",
            metric.value,
            self.state.scale_kind.value,
            len(self.positions),
            len(entered),
            len(circles.exit()),
        )
        return self

    # ------------------------------------------------------------------
    # hover
    def _show_tooltip(self, d, idx, el):
        point = d.datum
        value = format_number(",")(point.value(self.state.metric))
        self.tooltip_html = (
            f"Country: <strong>{html.escape(point.country)}</strong><br>"
            f"{html.escape(self.state.legend)}: <strong>{value}</strong>"
        )
        tooltip = self.tooltip.elements[0]
        for child in list(tooltip):
            tooltip.remove(child)
        markup = self.tooltip_html.replace("<br>", "<br/>")
        tooltip.append(etree.fromstring(f'<div xmlns="{XHTML_NS}">{markup}</div>'))

        cx = float(el.get("cx"))
        cy = float(el.get("cy"))
        self.tooltip.attrs(x=cx + 25, y=cy - 12, opacity=0.9)
        self.guide.attrs(
            x1=cx,
            y1=cy,
            x2=cx,
            y2=self.height - self.margin["bottom"],
            opacity=1,
        )

    def _hide_tooltip(self, *_):
        self.tooltip.attr("opacity", 0)
        self.guide.attr("opacity", 0)

    def hover(self, country):
        """Simulate the pointer moving onto the circle(s) of ``country``."""
        self.circles_for(country).dispatch("mousemove")
        return self

    def unhover(self, country):
        self.circles_for(country).dispatch("mouseout")
        return self

    # ------------------------------------------------------------------
    @property
    def circles(self):
        return self.layer.select_all(".countries")

    def circles_for(self, country):
        return self.circles.filter(lambda d, *_: d.datum.country == country)

    def continent_colors(self):
        return {continent: self.colors(continent) for continent in CONTINENTS}

    def advance(self, ms):
        self.svg.timeline.advance(ms)
        return self

    def settle(self):
        """Run every pending transition to completion."""
        self.svg.timeline.flush()
        return self

    def to_string(self, pretty=True):
        return self.svg.to_string(pretty=pretty)

    def save(self, path, pretty=True, settle=True):
        if settle:
            self.settle()
        self.svg.save(path, pretty=pretty)
