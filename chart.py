from dataclasses import dataclass, field

from scales import (
    is_selected,
    plotting_order,
    radius_scale_for,
    x_scale_for,
    y_scale_for,
)


@dataclass(frozen=True)
class Margin:
    top: int = 10
    right: int = 10
    bottom: int = 50
    left: int = 60


@dataclass(frozen=True)
class Layout:
    width: int = 1000
    height: int = 600
    margin: Margin = field(default_factory=Margin)


@dataclass(frozen=True)
class Area:
    top: int
    right: int
    bottom: int
    left: int
    width: int
    height: int


def usable_area(layout):
    m = layout.margin
    return Area(
        top=m.top,
        right=layout.width - m.right,
        bottom=layout.height - m.bottom,
        left=m.left,
        width=layout.width - m.left - m.right,
        height=layout.height - m.top - m.bottom,
    )


@dataclass(frozen=True)
class Point:
    commit: object
    cx: float
    cy: float
    r: float
    selected: bool = False

    @property
    def tooltip(self):
        return tooltip_fields(self.commit)


@dataclass(frozen=True)
class Tick:
    position: float
    label: str


@dataclass
class Chart:
    layout: Layout
    area: Area
    x_scale: object
    y_scale: object
    r_scale: object
    points: list
    x_ticks: list
    y_ticks: list


def tooltip_fields(commit):
    return {
        "id": commit.id,
        "url": commit.url or "",
        "date": commit.datetime.strftime("%Y-%m-%d"),
        "time": commit.datetime.strftime("%H:%M"),
        "author": commit.author,
        "lines": commit.total_lines,
    }


def hour_label(hour):
    return "%02d:00" % (int(hour) % 24)


def build_chart(commits, layout=None, selection=None):
    """
    Lay out every commit as a circle on the chart.

    The scales are returned alongside the points so that the caller can
    evaluate brush selections against exactly the mapping that was drawn.
    """
    if not commits:
        return None
    layout = layout or Layout()
    area = usable_area(layout)
    x_scale = x_scale_for(commits, area)
    y_scale = y_scale_for(area)
    r_scale = radius_scale_for(commits)

    points = [
        Point(
            commit=commit,
            cx=x_scale(commit.date),
            cy=y_scale(commit.hour_frac),
            r=r_scale(commit.total_lines),
            selected=is_selected(selection, commit, x_scale, y_scale),
        )
        for commit in plotting_order(commits)
    ]
    x_ticks = [Tick(x_scale(day), day.strftime("%Y-%m-%d")) for day in x_scale.ticks()]
    y_ticks = [Tick(y_scale(hour), hour_label(hour)) for hour in y_scale.ticks(2)]
    return Chart(
        layout=layout,
        area=area,
        x_scale=x_scale,
        y_scale=y_scale,
        r_scale=r_scale,
        points=points,
        x_ticks=x_ticks,
        y_ticks=y_ticks,
    )


def selected_commits(commits, chart, selection):
    return [
        commit
        for commit in commits
        if is_selected(selection, commit, chart.x_scale, chart.y_scale)
    ]
