# pip install lxml
from lxml import etree
from lxml.cssselect import CSSSelector
from cssselect import GenericTranslator
from decimal import Decimal
from functools import lru_cache
import math
import re

SVG_NS = "http://www.w3.org/2000/svg"
NSMAP = {None: SVG_NS}


class _SVGDefaultNamespaceTranslator(GenericTranslator):
    """Ensure bare element selectors target the SVG namespace."""

    def __init__(self, default_prefix="svg"):
        super().__init__()
        self._default_prefix = default_prefix

    def xpath_element(self, selector):
        if (
            self._default_prefix
            and selector.namespace is None
            and selector.element is not None
        ):
            selector = selector.__class__(self._default_prefix, selector.element)
        return super().xpath_element(selector)


_SVG_NAMESPACE_PREFIX = "svg"
_SVG_CSS_TRANSLATOR = _SVGDefaultNamespaceTranslator(default_prefix=_SVG_NAMESPACE_PREFIX)
_SVG_CSS_NAMESPACES = {_SVG_NAMESPACE_PREFIX: SVG_NS}


@lru_cache(maxsize=128)
def _svg_css_selector(css):
    return CSSSelector(
        css,
        translator=_SVG_CSS_TRANSLATOR,
        namespaces=_SVG_CSS_NAMESPACES,
    )

def _normalize_attr_name(name):
    """Convert pythonic attr names (text_anchor) into SVG attrs (text-anchor)."""
    return name.replace("_", "-")


def _el(tag, **attrs):
    el = etree.Element(f"{{{SVG_NS}}}{tag}", nsmap=NSMAP)
    for k, v in attrs.items():
        el.set(_normalize_attr_name(k), str(v))
    return el


def _as_float(value, default=None):
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Selection:
    _data_binding = {}
    _listeners = {}

    def __init__(self, elements, parents=None, timeline=None):
        # elements: list[etree._Element]
        self.elements = elements
        self._parents = list(parents or [])
        self._timeline = timeline
        self._enter = []
        self._exit = []

    def __len__(self):
        return len(self.elements)

    @classmethod
    def _get_data(cls, el):
        binding = cls._data_binding.get(id(el))
        if binding and binding[0] is el:
            return binding[1]
        return None

    @classmethod
    def _set_data(cls, el, value):
        cls._data_binding[id(el)] = (el, value)

    @classmethod
    def _release(cls, el):
        """Forget bindings and listeners of a detached element and its subtree."""
        for node in el.iter():
            for registry in (cls._data_binding, cls._listeners):
                entry = registry.get(id(node))
                if entry and entry[0] is node:
                    del registry[id(node)]

    def _derive(self, elements, parents=None):
        return Selection(
            elements,
            parents=self._parents if parents is None else parents,
            timeline=self._timeline,
        )

    def append(self, tag, **attrs):
        """Append a child to every element in the selection; returns a new Selection of appended nodes."""
        kids = []
        for el in self.elements:
            child = _el(tag, **attrs)
            el.append(child)
            Selection._set_data(child, Selection._get_data(el))
            kids.append(child)
        return self._derive(kids, parents=self.elements)

    def attr(self, name, value=None):
        """
        Set an attribute on all elements (returns self), or get the first value if value is None.
        """
        attr_name = _normalize_attr_name(name)
        if value is None:
            return self.elements[0].get(attr_name) if self.elements else None
        for idx, el in enumerate(self.elements):
            val = value
            if callable(value):
                val = value(Selection._get_data(el), idx, el)
            if val is None:
                continue
            el.set(attr_name, str(val))
        return self

    def attrs(self, **kvs):
        """Set multiple attributes at once."""
        for k, v in kvs.items():
            self.attr(k, v)
        return self

    def style(self, **kvs):
        """Merge into the 'style' attribute: style(fill='red', stroke='black')."""
        for idx, el in enumerate(self.elements):
            current = {}
            if el.get("style"):
                for pair in el.get("style").split(";"):
                    if pair.strip():
                        k, _, v = pair.partition(":")
                        current[k.strip()] = v.strip()
            for k, v in kvs.items():
                val = v
                if callable(v):
                    val = v(Selection._get_data(el), idx, el)
                if val is None:
                    continue
                current[_normalize_attr_name(k)] = str(val)
            el.set("style", ";".join(f"{k}:{v}" for k, v in current.items()))
        return self

    def text(self, s):
        for idx, el in enumerate(self.elements):
            val = s
            if callable(s):
                val = s(Selection._get_data(el), idx, el)
            if val is None:
                continue
            el.text = str(val)
        return self

    def datum(self, value=None):
        """Get or set bound data on the selection."""
        if value is None:
            return Selection._get_data(self.elements[0]) if self.elements else None
        for idx, el in enumerate(self.elements):
            current = Selection._get_data(el)
            new_val = value(current, idx, el) if callable(value) else value
            Selection._set_data(el, new_val)
        return self

    def data(self, data_iterable, key=None):
        """Bind a sequence of data objects to the selection.

        Without ``key`` the data is bound by index and the lengths must match.
        With ``key`` a keyed join is performed: the returned selection holds
        the elements whose key matched a datum (now bound to that datum), and
        ``enter()`` / ``exit()`` expose unmatched data and unmatched elements.
        """
        data_list = list(data_iterable)
        if key is None:
            if len(data_list) != len(self.elements):
                raise ValueError(
                    "MiniD3 Selection.data requires len(data) == number of selected elements"
                )
            for el, datum in zip(self.elements, data_list):
                Selection._set_data(el, datum)
            return self

        by_key = {}
        leftovers = []
        for el in self.elements:
            k = key(Selection._get_data(el))
            if k in by_key:
                leftovers.append(el)
            else:
                by_key[k] = el

        update = []
        enter = []
        for datum in data_list:
            el = by_key.pop(key(datum), None)
            if el is None:
                enter.append(datum)
                continue
            Selection._set_data(el, datum)
            update.append(el)

        unmatched = {id(el) for el in leftovers}
        unmatched.update(id(el) for el in by_key.values())
        joined = self._derive(update)
        joined._enter = enter
        joined._exit = [el for el in self.elements if id(el) in unmatched]
        return joined

    def enter(self):
        return EnterSelection(self._enter, self._parents, self._timeline)

    def exit(self):
        return self._derive(list(self._exit))

    def merge(self, other):
        seen = {id(el) for el in self.elements}
        merged = list(self.elements)
        merged.extend(el for el in other.elements if id(el) not in seen)
        return self._derive(merged)

    def filter(self, predicate):
        kept = [
            el
            for idx, el in enumerate(self.elements)
            if predicate(Selection._get_data(el), idx, el)
        ]
        return self._derive(kept)

    def each(self, func):
        for idx, el in enumerate(self.elements):
            func(Selection._get_data(el), idx, el)
        return self

    def call(self, func, *args, **kwargs):
        func(self, *args, **kwargs)
        return self

    def remove(self):
        """Detach every element from its parent."""
        for el in self.elements:
            parent = el.getparent()
            if parent is not None:
                parent.remove(el)
            Selection._release(el)
        return self

    def on(self, event, handler):
        """Register (or with ``handler=None`` drop) a listener for ``event``."""
        for el in self.elements:
            entry = Selection._listeners.get(id(el))
            if not entry or entry[0] is not el:
                entry = (el, {})
                Selection._listeners[id(el)] = entry
            if handler is None:
                entry[1].pop(event, None)
            else:
                entry[1][event] = handler
        return self

    def dispatch(self, event):
        """Invoke the ``event`` listener of each element as handler(d, idx, el)."""
        for idx, el in enumerate(self.elements):
            entry = Selection._listeners.get(id(el))
            if not entry or entry[0] is not el:
                continue
            handler = entry[1].get(event)
            if handler is not None:
                handler(Selection._get_data(el), idx, el)
        return self

    def transition(self, duration=250, ease=None):
        timeline = self._timeline or _DEFAULT_TIMELINE
        return Transition(self.elements, timeline, duration=duration, ease=ease)

    def select(self, css):
        """Select first match under each element; returns a Selection of all matches."""
        sel = _svg_css_selector(css)
        found = []
        for el in self.elements:
            matches = sel(el)
            if not matches:
                continue
            match = matches[0]
            Selection._set_data(match, Selection._get_data(el))
            found.append(match)
        return self._derive(found)

    def select_all(self, css):
        """Select all matches under each element."""
        sel = _svg_css_selector(css)
        found = []
        for el in self.elements:
            matches = sel(el)
            if not matches:
                continue
            found.extend(matches)
        return self._derive(found, parents=self.elements)


class EnterSelection:
    """Placeholder for data that had no matching element in a keyed join."""

    def __init__(self, data, parents, timeline=None):
        self.data = list(data)
        self._parents = list(parents)
        self._timeline = timeline

    def __len__(self):
        return len(self.data)

    def append(self, tag, **attrs):
        if self.data and not self._parents:
            raise ValueError("EnterSelection.append requires a parent element")
        kids = []
        for datum in self.data:
            child = _el(tag, **attrs)
            self._parents[0].append(child)
            Selection._set_data(child, datum)
            kids.append(child)
        return Selection(kids, parents=self._parents, timeline=self._timeline)


_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _interpolate_number(a, b):
    return lambda t: str(a + (b - a) * t)


def _interpolate_string(a, b):
    """Interpolate the numbers embedded in two strings of the same shape.

    Returns None when the non-numeric parts differ, e.g.
    ``translate(1,0)`` and ``translate(nan,0)``, and for hex colours.
    """
    if a.startswith("#") or b.startswith("#"):
        return None
    a_parts, b_parts = _NUMBER_RE.split(a), _NUMBER_RE.split(b)
    if a_parts != b_parts:
        return None
    pairs = [
        (float(x), float(y))
        for x, y in zip(_NUMBER_RE.findall(a), _NUMBER_RE.findall(b))
    ]

    def interpolate(t):
        out = [b_parts[0]]
        for (x0, x1), tail in zip(pairs, b_parts[1:]):
            out.append(str(x0 + (x1 - x0) * t))
            out.append(tail)
        return "".join(out)

    return interpolate


def ease_cubic_in_out(t):
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


class _Track:
    def __init__(self, el, start, duration, ease):
        self.el = el
        self.start = start
        self.duration = max(float(duration), 0.0)
        self.ease = ease
        self.tweens = {}
        self.remove_on_end = False

    @property
    def end(self):
        return self.start + self.duration

    def step(self, now):
        if self.duration == 0:
            t = 1.0
        else:
            t = min(max((now - self.start) / self.duration, 0.0), 1.0)
        eased = self.ease(t)
        for name, (interpolate, finish) in self.tweens.items():
            if t >= 1.0:
                self.el.set(name, str(finish))
            elif interpolate is not None:
                self.el.set(name, interpolate(eased))
        if t < 1.0:
            return False
        if self.remove_on_end:
            parent = self.el.getparent()
            if parent is not None:
                parent.remove(self.el)
            Selection._release(self.el)
        return True


class Timeline:
    """Virtual clock driving transitions; time only moves on advance()/flush()."""

    def __init__(self):
        self.now = 0.0
        self._tracks = {}

    @property
    def pending(self):
        return len(self._tracks)

    def schedule(self, el, duration, ease=None):
        # a newer transition interrupts the running one on the same element
        track = _Track(el, self.now, duration, ease or ease_cubic_in_out)
        self._tracks[id(el)] = track
        return track

    def advance(self, ms):
        self.now += float(ms)
        for key, track in list(self._tracks.items()):
            if track.step(self.now):
                del self._tracks[key]
        return self

    def flush(self):
        if not self._tracks:
            return self
        latest = max(track.end for track in self._tracks.values())
        return self.advance(max(latest - self.now, 0.0))


_DEFAULT_TIMELINE = Timeline()


class Transition:
    """Animated attribute changes scheduled on a Timeline.

    Numeric attributes are interpolated from their current value; anything
    else is applied when the transition ends.
    """

    def __init__(self, elements, timeline, duration=250, ease=None):
        self.elements = list(elements)
        self.timeline = timeline
        self._tracks = [timeline.schedule(el, duration, ease) for el in self.elements]

    def attr(self, name, value):
        attr_name = _normalize_attr_name(name)
        for idx, (el, track) in enumerate(zip(self.elements, self._tracks)):
            val = value
            if callable(value):
                val = value(Selection._get_data(el), idx, el)
            if val is None:
                continue
            current = el.get(attr_name)
            begin = _as_float(current)
            if _is_number(val) and begin is not None:
                val = float(val)
                track.tweens[attr_name] = (_interpolate_number(begin, val), val)
            elif isinstance(val, str) and current is not None:
                track.tweens[attr_name] = (_interpolate_string(current, val), val)
            else:
                track.tweens[attr_name] = (None, val)
        return self

    def attrs(self, **kvs):
        for k, v in kvs.items():
            self.attr(k, v)
        return self

    def remove(self):
        """Detach the elements once the transition ends."""
        for track in self._tracks:
            track.remove_on_end = True
        return self


class MiniD3SVG:
    def __init__(self, width=800, height=600, viewBox=None, bg=None):
        self.root = _el("svg", width=str(width), height=str(height))
        if viewBox:
            self.root.set("viewBox", viewBox)
        if bg:
            # rect background
            rect = _el("rect", x="0", y="0", width="100%", height="100%", fill=bg)
            self.root.append(rect)
        self.timeline = Timeline()

    @classmethod
    def from_string(cls, svg_text):
        doc = etree.fromstring(svg_text.encode("utf-8"))
        obj = cls.__new__(cls)
        obj.root = doc
        obj.timeline = Timeline()
        return obj

    @classmethod
    def from_file(cls, path):
        with open(path, "rb") as f:
            doc = etree.parse(f).getroot()
        obj = cls.__new__(cls)
        obj.root = doc
        obj.timeline = Timeline()
        return obj

    def select(self, css):
        sel = _svg_css_selector(css)
        found = sel(self.root)
        return Selection(found[:1], parents=[self.root], timeline=self.timeline)

    def select_all(self, css):
        sel = _svg_css_selector(css)
        return Selection(sel(self.root), parents=[self.root], timeline=self.timeline)

    def append(self, tag, **attrs):
        child = _el(tag, **attrs)
        self.root.append(child)
        return Selection([child], parents=[self.root], timeline=self.timeline)

    def add_style(self, css_text, **attrs):
        style_attrs = {"type": "text/css"}
        style_attrs.update({ _normalize_attr_name(k): v for k, v in attrs.items() })
        style_el = _el("style", **style_attrs)
        style_el.text = css_text
        # ensure styles sit near the top for readability
        self.root.insert(0, style_el)
        return Selection([style_el], parents=[self.root], timeline=self.timeline)

    def to_string(self, pretty=True):
        return etree.tostring(self.root, pretty_print=pretty, encoding="unicode")

    def save(self, path, pretty=True):
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_string(pretty=pretty))


# ----------------------------------------------------------------------
# ticks

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def _round_half_up(value):
    return math.floor(value + 0.5)


def _tick_spec(start, stop, count):
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / 10 ** power
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1
    if power < 0:
        inc = 10 ** -power / factor
        i1 = _round_half_up(start * inc)
        i2 = _round_half_up(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = 10 ** power * factor
        i1 = _round_half_up(start / inc)
        i2 = _round_half_up(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1
    if i2 < i1 and 0.5 <= count < 2:
        return _tick_spec(start, stop, count * 2)
    return i1, i2, inc


def ticks(start, stop, count=10):
    """Nicely rounded values between start and stop (d3.ticks)."""
    start, stop, count = float(start), float(stop), float(count)
    if not count > 0 or not (math.isfinite(start) and math.isfinite(stop)):
        return []
    if start == stop:
        return [start]
    reverse = stop < start
    i1, i2, inc = _tick_spec(stop, start, count) if reverse else _tick_spec(start, stop, count)
    if not i2 >= i1:
        return []
    n = i2 - i1 + 1
    if reverse:
        steps = [i2 - i for i in range(n)]
    else:
        steps = [i1 + i for i in range(n)]
    if inc < 0:
        return [s / -inc for s in steps]
    return [s * inc for s in steps]


def extent(values, key=None):
    """(min, max) ignoring None/NaN; (nan, nan) when nothing is left."""
    lo = hi = None
    for value in values:
        if key is not None:
            value = key(value)
        value = _as_float(value)
        if value is None or math.isnan(value):
            continue
        if lo is None or value < lo:
            lo = value
        if hi is None or value > hi:
            hi = value
    if lo is None:
        return (math.nan, math.nan)
    return (lo, hi)


# ----------------------------------------------------------------------
# number formatting (subset of d3-format)

_SPECIFIER_RE = re.compile(r"^(,)?(?:\.(\d+))?(~)?([dfgs]?)$")
_SI_PREFIXES = ["y", "z", "a", "f", "p", "n", "µ", "m", "", "k", "M", "G", "T", "P", "E", "Z", "Y"]
_MINUS = "−"


def _decimal_parts(x, precision):
    """Significant digits and decimal exponent of abs(x)."""
    x = abs(x)
    if precision:
        mantissa, _, exponent = f"{x:.{precision - 1}e}".partition("e")
        return mantissa.replace(".", ""), int(exponent)
    value = Decimal(repr(x)).normalize()
    digits = "".join(str(d) for d in value.as_tuple().digits)
    return digits, (value.adjusted() if x else 0)


def _format_prefix_auto(x, precision):
    coefficient, exponent = _decimal_parts(x, precision)
    prefix_exponent = max(-8, min(8, math.floor(exponent / 3))) * 3
    i = exponent - prefix_exponent + 1
    n = len(coefficient)
    if i == n:
        body = coefficient
    elif i > n:
        body = coefficient + "0" * (i - n)
    elif i > 0:
        body = coefficient[:i] + "." + coefficient[i:]
    else:
        body = "0." + "0" * -i + _decimal_parts(x, max(0, precision + i - 1))[0]
    return body + _SI_PREFIXES[8 + prefix_exponent // 3]


def _trim_zeros(text):
    if "." not in text:
        return text
    head, _, tail = text.partition(".")
    digits = re.match(r"\d*", tail).group(0)
    suffix = tail[len(digits):]
    digits = digits.rstrip("0")
    return (head + "." + digits if digits else head) + suffix


def format_number(specifier):
    """Return a formatter for a d3-format specifier.

    Supported: optional ``,`` grouping, ``.precision``, ``~`` trimming and the
    types ``d``, ``f``, ``g``, ``s`` or none (``","`` formats like ``,.12~g``).
    """
    match = _SPECIFIER_RE.match(specifier)
    if not match:
        raise ValueError(f"Unsupported format specifier: {specifier!r}")
    comma, precision, trim, kind = match.groups()
    grouping = "," if comma else ""
    trim = bool(trim)
    if precision is None:
        if kind == "":
            precision, trim = 12, True
        else:
            precision = 6
    precision = int(precision)
    if kind in ("", "g", "s"):
        precision = max(1, min(21, precision))
    else:
        precision = max(0, min(20, precision))

    def fmt(value):
        x = float(value)
        if math.isnan(x):
            return "NaN"
        negative = x < 0
        x = abs(x)
        if kind == "s":
            body = _format_prefix_auto(x, precision)
        elif kind == "f":
            body = format(x, f"{grouping}.{precision}f")
        elif kind == "d":
            body = format(_round_half_up(x), f"{grouping}d")
        else:
            body = format(x, f"{grouping}.{precision}g")
        if trim:
            body = _trim_zeros(body)
        if negative and any(ch in "123456789" for ch in body):
            body = _MINUS + body
        return body

    return fmt


# ----------------------------------------------------------------------
# scales

class LinearScale:
    """Tiny helper similar to d3.scaleLinear."""

    def __init__(self, domain=(0.0, 1.0), range_=(0.0, 1.0)):
        self._domain = tuple(map(float, domain))
        self._range = tuple(map(float, range_))

    def domain(self, values=None):
        if values is None:
            return self._domain
        if len(values) != 2:
            raise ValueError(f"{type(self).__name__}.domain expects two values")
        self._domain = tuple(map(float, values))
        return self

    def range(self, values=None):
        if values is None:
            return self._range
        if len(values) != 2:
            raise ValueError(f"{type(self).__name__}.range expects two values")
        self._range = tuple(map(float, values))
        return self

    def _transform(self, value):
        return value

    def _normalize(self, value):
        d0, d1 = (self._transform(d) for d in self._domain)
        span = d1 - d0
        if math.isnan(span):
            return math.nan
        if span == 0:
            # degenerate domain maps to the middle of the range
            return 0.5
        return (self._transform(value) - d0) / span

    def __call__(self, value):
        value = _as_float(value, math.nan)
        r0, r1 = self._range
        t = self._normalize(value)
        return r0 + t * (r1 - r0)

    def ticks(self, count=10):
        d0, d1 = self._domain
        return ticks(d0, d1, count)

    def tick_format(self, count=10, specifier=None):
        return format_number(specifier or ",")


class LogScale(LinearScale):
    """Base-10 log scale similar to d3.scaleLog.

    A domain that touches or crosses zero has no meaningful log transform:
    positions then come out as NaN, the same way d3 misplaces them.
    """

    base = 10

    def __init__(self, domain=(1.0, 10.0), range_=(0.0, 1.0)):
        super().__init__(domain, range_)

    def _transform(self, value):
        if self._domain[0] < 0:
            value = -value
            return -math.log10(value) if value > 0 else (math.inf if value == 0 else math.nan)
        if value > 0:
            return math.log10(value)
        return -math.inf if value == 0 else math.nan

    def ticks(self, count=10):
        u, v = self._domain
        reverse = v < u
        if reverse:
            u, v = v, u
        # only strictly positive domains produce ticks
        if not (u > 0 and math.isfinite(v)):
            return []
        i, j = math.log10(u), math.log10(v)
        if j - i < count:
            z = []
            for e in range(math.floor(i), math.ceil(j) + 1):
                for k in range(1, self.base):
                    t = k / 10 ** -e if e < 0 else k * 10 ** e
                    if t < u:
                        continue
                    if t > v:
                        break
                    z.append(t)
            if len(z) * 2 < count:
                z = ticks(u, v, count)
        else:
            z = [10 ** t for t in ticks(i, j, min(j - i, count))]
        return z[::-1] if reverse else z

    def tick_format(self, count=10, specifier=None):
        fmt = format_number(specifier or "~s")
        values = self.ticks(count)
        k = max(1, self.base * count / len(values)) if values else 1

        def label(value):
            value = float(value)
            if not value > 0:
                return fmt(value)
            i = value / 10 ** _round_half_up(math.log10(value))
            if i * self.base < self.base - 0.5:
                i *= self.base
            return fmt(value) if i <= k else ""

        return label


class OrdinalScale:
    """Map discrete inputs to items in a range list (wraps around)."""

    def __init__(self, domain=None, range_=None):
        self._domain = list(domain or [])
        self._range = list(range_ or [])

    def domain(self, values):
        self._domain = list(values)
        return self

    def range(self, values):
        self._range = list(values)
        return self

    def __call__(self, value):
        if value not in self._domain:
            self._domain.append(value)
        if not self._range:
            raise ValueError("OrdinalScale requires a non-empty range list")
        idx = self._domain.index(value) % len(self._range)
        return self._range[idx]


def scale_linear(domain=(0.0, 1.0), range_=(0.0, 1.0)):
    return LinearScale(domain, range_)


def scale_log(domain=(1.0, 10.0), range_=(0.0, 1.0)):
    return LogScale(domain, range_)


def scale_ordinal(domain=None, range_=None):
    return OrdinalScale(domain, range_)


# ----------------------------------------------------------------------
# axes

class Axis:
    """Horizontal bottom axis rendered into a <g>, similar to d3.axisBottom.

    With a ``duration`` the ticks are joined by value: new ticks fade in from
    where the previous scale had them, old ones slide to their place on the new
    scale and fade out before removal.
    """

    # scale last rendered into each axis group
    _charts = {}

    def __init__(self, scale):
        self.scale = scale
        self._count = 10
        self._specifier = None
        self._tick_size_inner = 6
        self._tick_size_outer = 6
        self._tick_padding = 3
        self._offset = 0.5
        self._duration = 0

    def ticks(self, count=10, specifier=None):
        self._count = count
        self._specifier = specifier
        return self

    def tick_size_outer(self, size):
        self._tick_size_outer = size
        return self

    def tick_size_inner(self, size):
        self._tick_size_inner = size
        return self

    def duration(self, ms):
        self._duration = ms
        return self

    def tick_values(self):
        return [v for v in self.scale.ticks(self._count) if math.isfinite(self.scale(v))]

    def tick_labels(self):
        fmt = self.scale.tick_format(self._count, self._specifier)
        return [fmt(v) for v in self.tick_values()]

    def _position(self, scale, value):
        x = scale(value) if scale is not None else math.nan
        return x + self._offset if math.isfinite(x) else None

    def __call__(self, selection):
        r0, r1 = self.scale.range()
        outer = self._tick_size_outer
        domain_path = f"M{r0 + self._offset},{outer}V{self._offset}H{r1 + self._offset}V{outer}"
        for el in selection.elements:
            el.set("fill", "none")
            el.set("font-size", "10")
            el.set("font-family", "sans-serif")
            el.set("text-anchor", "middle")
            g = Selection([el], timeline=selection._timeline)
            if self._duration:
                previous = Axis._charts.get(id(el))
                self._render_animated(g, previous[1] if previous else None)
            else:
                for old in list(el):
                    el.remove(old)
                    Selection._release(old)
                g.append("path", stroke="currentColor", **{"class": "domain"})
                for value in self.tick_values():
                    self._append_tick(g, value, self._position(self.scale, value), 1)
            g.select(".domain").attr("d", domain_path)
            Axis._charts[id(el)] = (el, self.scale)
        return selection

    def _append_tick(self, parent, value, x, opacity):
        fmt = self.scale.tick_format(self._count, self._specifier)
        spacing = max(self._tick_size_inner, 0) + self._tick_padding
        tick = parent.append(
            "g", opacity=opacity, transform=f"translate({x},0)", **{"class": "tick"}
        )
        Selection._set_data(tick.elements[0], value)
        tick.append("line", stroke="currentColor", y2=self._tick_size_inner)
        tick.append("text", fill="currentColor", y=spacing, dy="0.71em").text(fmt(value))
        return tick

    def _render_animated(self, g, previous):
        fmt = self.scale.tick_format(self._count, self._specifier)
        if not len(g.select(".domain")):
            g.append("path", stroke="currentColor", **{"class": "domain"})
        ticks = g.select_all(".tick").data(self.tick_values(), key=float)

        for el in ticks.exit().elements:
            value = Selection._get_data(el)
            x = self._position(self.scale, value)
            fade = Selection([el], timeline=g._timeline).transition(self._duration)
            if x is not None:
                fade.attr("transform", f"translate({x},0)")
            fade.attr("opacity", 0).remove()

        entered = []
        for value in ticks.enter().data:
            x = self._position(self.scale, value)
            start = self._position(previous, value)
            tick = self._append_tick(g, value, x if start is None else start, 0)
            entered.extend(tick.elements)

        ticks.select("text").text(lambda d, *_: fmt(d))
        ticks.merge(Selection(entered)).transition(self._duration) \
            .attr("transform", lambda d, *_: f"translate({self._position(self.scale, d)},0)") \
            .attr("opacity", 1)


def axis_bottom(scale):
    return Axis(scale)
