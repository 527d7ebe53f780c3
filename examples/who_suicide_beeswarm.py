"""Render the WHO suicide statistics beeswarm to an SVG file."""

import argparse
import logging

from dotenv import load_dotenv

from d3_svg_beeswarm.beeswarm import CONTINENTS, BeeswarmChart, Metric, ScaleKind, data_url


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--source", default=None, help="CSV path or URL (default: $BEESWARM_DATA_URL)")
    parser.add_argument("--metric", choices=[m.value for m in Metric], default=Metric.TOTAL.value)
    parser.add_argument("--scale", choices=[s.value for s in ScaleKind], default=ScaleKind.LINEAR.value)
    parser.add_argument(
        "--continent",
        action="append",
        choices=CONTINENTS,
        help="continent to show; repeat for several (default: all)",
    )
    parser.add_argument("--output", default="beeswarm.svg")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv=None):
    load_dotenv(override=False)
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    chart = BeeswarmChart.from_source(args.source or data_url())
    chart.select_metric(args.metric)
    chart.select_scale(args.scale)
    if args.continent is not None:
        chart.set_continents(args.continent)
    chart.save(args.output)
    logging.getLogger(__name__).info("wrote %d circles to %s", len(chart.circles), args.output)


if __name__ == "__main__":
    main()
