"""Minimal example of a keyed data join with animated updates."""

from d3_svg_beeswarm import MiniD3SVG


def main():
    svg = MiniD3SVG(width=320, height=160, bg="#f8f8f8")
    group = svg.append("g", transform="translate(20,20)")

    def draw(data):
        circles = group.select_all("circle").data(data, key=lambda d: d["label"])
        circles.exit().transition(500).attr("r", 0).remove()
        circles.enter().append("circle", r=0, fill="#1f77b4").attrs(
            cx=lambda d, *_: d["cx"], cy=lambda d, *_: d["cy"]
        ).merge(circles).transition(1000) \
            .attr("cx", lambda d, *_: d["cx"]) \
            .attr("r", lambda d, *_: d["r"])

    draw([
        {"cx": 30, "cy": 30, "r": 12, "label": "A"},
        {"cx": 90, "cy": 70, "r": 18, "label": "B"},
    ])
    svg.timeline.flush()

    draw([
        {"cx": 60, "cy": 70, "r": 18, "label": "B"},
        {"cx": 150, "cy": 40, "r": 10, "label": "C"},
    ])
    svg.timeline.flush()

    svg.save("basic_circles.svg")


if __name__ == "__main__":
    main()
