from dataclasses import dataclass

import numpy as np
import pandas as pd


ONE_DAY = pd.Timedelta(days=1)
RADIUS_RANGE = (2, 30)
MAX_TIME_TICKS = 12


class LinearScale:
    def __init__(self, domain, range, clamp=False):
        self.domain = tuple(float(d) for d in domain)
        self.range = tuple(float(r) for r in range)
        self.clamp = clamp

    def __call__(self, value):
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            # degenerate domain maps everything onto the middle of the range
            return (r0 + r1) / 2
        t = (float(value) - d0) / (d1 - d0)
        if self.clamp:
            t = min(max(t, 0.0), 1.0)
        return r0 + t * (r1 - r0)

    def ticks(self, step=1):
        d0, d1 = sorted(self.domain)
        return list(np.arange(np.ceil(d0 / step) * step, d1 + step / 2, step))


class SqrtScale(LinearScale):
    """Square root scale, so that circle area grows linearly with the value."""

    def __init__(self, domain, range, clamp=True):
        super().__init__(np.sqrt(np.asarray(domain, dtype=float)), range, clamp=clamp)

    def __call__(self, value):
        return super().__call__(np.sqrt(max(float(value), 0.0)))


class TimeScale:
    def __init__(self, domain, range):
        start, end = domain
        self.domain = (start, end)
        self.range = tuple(float(r) for r in range)
        self._linear = LinearScale((start.timestamp(), end.timestamp()), range)

    def __call__(self, value):
        return self._linear(value.timestamp())

    def ticks(self, max_ticks=MAX_TIME_TICKS):
        start, end = self.domain
        end = end.tz_convert(start.tz) if start.tz is not None else end
        days = pd.date_range(start.ceil("D"), end, freq="D")
        step = max(1, int(np.ceil(len(days) / max_ticks)))
        return list(days[::step])


def x_scale_for(commits, area, pad=ONE_DAY):
    dates = [c.date for c in commits]
    return TimeScale((min(dates) - pad, max(dates) + pad), (area.left, area.right))


def y_scale_for(area):
    return LinearScale((0, 24), (area.bottom, area.top))


def radius_scale_for(commits, radius_range=RADIUS_RANGE):
    sizes = [c.total_lines for c in commits]
    return SqrtScale((min(sizes), max(sizes)), radius_range)


def plotting_order(commits):
    # biggest first so the small dots stay on top and can be hovered
    return sorted(commits, key=lambda c: c.total_lines, reverse=True)


@dataclass(frozen=True)
class Selection:
    x0: float
    y0: float
    x1: float
    y1: float

    @classmethod
    def from_corners(cls, corners):
        (x0, y0), (x1, y1) = corners
        return cls(float(x0), float(y0), float(x1), float(y1))

    def contains(self, x, y):
        return (
            min(self.x0, self.x1) <= x <= max(self.x0, self.x1)
            and min(self.y0, self.y1) <= y <= max(self.y0, self.y1)
        )


def is_selected(selection, commit, x_scale, y_scale):
    """
    True when the commit's plotted point lies inside the brushed rectangle.

    Bounds are inclusive on all four sides, so a zero-area selection still
    picks up points that land exactly on that pixel.
    """
    if selection is None:
        return False
    return selection.contains(x_scale(commit.date), y_scale(commit.hour_frac))
