from lxml import etree

from d3_svg_beeswarm import MiniD3SVG, Selection, SVG_NS, Timeline


def _keyed(d):
    return d["key"]


def test_attr_name_conversion_and_data_binding():
    svg = MiniD3SVG(width=200, height=100)
    group = svg.append("g")
    data = [{"cx": 10, "cy": 15}, {"cx": 40, "cy": 35}]
    nodes = [group.append("circle").elements[0] for _ in data]

    sel = Selection(nodes).data(data)
    sel.attr("stroke_width", 2)
    sel.attr("cx", lambda d, *_: d["cx"]).attr("cy", lambda d, *_: d["cy"])

    assert nodes[0].get("stroke-width") == "2"
    assert nodes[0].get("cx") == "10"
    assert nodes[1].get("cy") == "35"


def test_select_all_applies_attrs_with_svg_namespace():
    svg = MiniD3SVG(width=200, height=100)
    layer = svg.append("g", **{"class": "layer"})
    for _ in range(3):
        layer.append("circle", **{"class": "dot"})

    circles = svg.select_all("circle")
    assert len(circles) == 3
    circles.attr("r", 15)
    assert all(circle.get("r") == "15" for circle in circles.elements)

    dots = svg.select(".layer").select_all(".dot")
    dots.attrs(fill="#123456", stroke_width="4")
    assert all(el.tag == f"{{{SVG_NS}}}circle" for el in dots.elements)
    assert all(el.get("stroke-width") == "4" for el in dots.elements)


def test_keyed_join_splits_enter_update_exit():
    svg = MiniD3SVG(width=100, height=100)
    layer = svg.append("g")
    first = layer.select_all(".item").data([{"key": "a"}, {"key": "b"}], key=_keyed)
    assert len(first) == 0
    assert len(first.enter()) == 2
    first.enter().append("circle", **{"class": "item"})

    second = layer.select_all(".item").data(
        [{"key": "b", "v": 2}, {"key": "c"}], key=_keyed
    )
    assert [d["key"] for d in (Selection._get_data(el) for el in second.elements)] == ["b"]
    assert Selection._get_data(second.elements[0])["v"] == 2
    assert [d["key"] for d in second.enter().data] == ["c"]
    assert [Selection._get_data(el)["key"] for el in second.exit().elements] == ["a"]

    second.exit().remove()
    second.enter().append("circle", **{"class": "item"})
    keys = sorted(Selection._get_data(el)["key"] for el in layer.select_all(".item").elements)
    assert keys == ["b", "c"]


def test_keyed_join_sends_duplicate_elements_to_exit():
    svg = MiniD3SVG(width=100, height=100)
    layer = svg.append("g")
    layer.select_all(".item").data([{"key": "a"}, {"key": "a"}], key=_keyed) \
        .enter().append("circle", **{"class": "item"})

    joined = layer.select_all(".item").data([{"key": "a"}, {"key": "a"}], key=_keyed)
    assert len(joined) == 1
    assert len(joined.enter()) == 1
    assert len(joined.exit()) == 1


def test_transition_interpolates_and_settles():
    svg = MiniD3SVG(width=100, height=100)
    circle = svg.append("circle", cx=0, cy=10)
    circle.transition(1000).attr("cx", 100).attr("fill", "red")

    svg.timeline.advance(500)
    assert float(circle.attr("cx")) == 50.0
    assert circle.attr("fill") is None

    svg.timeline.advance(500)
    assert float(circle.attr("cx")) == 100.0
    assert circle.attr("fill") == "red"
    assert svg.timeline.pending == 0


def test_newer_transition_interrupts_older_one():
    svg = MiniD3SVG(width=100, height=100)
    circle = svg.append("circle", cx=0)
    circle.transition(1000).attr("cx", 100).remove()
    svg.timeline.advance(500)

    circle.transition(1000).attr("cx", 0)
    assert svg.timeline.pending == 1
    svg.timeline.flush()

    assert float(circle.attr("cx")) == 0.0
    # the interrupted removal never happens
    assert circle.elements[0].getparent() is svg.root


def test_transition_remove_detaches_after_end():
    svg = MiniD3SVG(width=100, height=100)
    circle = svg.append("circle", cx=5)
    circle.transition(200).attr("cx", 0).remove()
    svg.timeline.advance(100)
    assert len(svg.select_all("circle")) == 1
    svg.timeline.flush()
    assert len(svg.select_all("circle")) == 0


def test_on_and_dispatch_pass_bound_datum():
    svg = MiniD3SVG(width=100, height=100)
    circles = svg.append("g").select_all("circle").data(
        [{"key": "x"}, {"key": "y"}], key=_keyed
    ).enter().append("circle")
    seen = []
    circles.on("mousemove", lambda d, idx, el: seen.append((d["key"], idx)))

    circles.filter(lambda d, *_: d["key"] == "y").dispatch("mousemove")
    assert seen == [("y", 0)]

    circles.on("mousemove", None).dispatch("mousemove")
    assert seen == [("y", 0)]


def test_timeline_flush_without_tracks_is_noop():
    timeline = Timeline()
    timeline.flush()
    assert timeline.now == 0.0


def test_round_trip_through_string():
    svg = MiniD3SVG(width=120, height=60, bg="#fff")
    svg.append("circle", cx=3, cy=4, r=5, **{"class": "dot"})
    parsed = MiniD3SVG.from_string(svg.to_string(pretty=False))
    dots = parsed.select_all(".dot")
    assert dots.attr("r") == "5"
    root = etree.fromstring(svg.to_string().encode("utf-8"))
    assert root.get("width") == "120"


def test_transition_interpolates_transform_strings():
    svg = MiniD3SVG(width=100, height=100)
    group = svg.append("g", transform="translate(0,10)")
    group.transition(1000).attr("transform", "translate(100,10)")
    svg.timeline.advance(500)
    assert group.attr("transform") == "translate(50.0,10.0)"
    svg.timeline.flush()
    assert group.attr("transform") == "translate(100,10)"


def test_removed_elements_release_bindings():
    svg = MiniD3SVG(width=100, height=100)
    layer = svg.append("g")
    before = (len(Selection._data_binding), len(Selection._listeners))
    circles = layer.select_all("circle").data([{"key": "a"}, {"key": "b"}], key=_keyed) \
        .enter().append("circle")
    circles.on("mousemove", lambda *_: None)
    circles.filter(lambda d, *_: d["key"] == "a").remove()
    circles.filter(lambda d, *_: d["key"] == "b").transition(100).remove()
    svg.timeline.flush()

    assert len(layer.select_all("circle")) == 0
    assert (len(Selection._data_binding), len(Selection._listeners)) == before
