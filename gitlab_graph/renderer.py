"""
Rendering surfaces for the contribution graph.

The graph is laid out as columns (weeks) of up to seven day cells (Sunday
first). Renderers only receive "add a column" and "add a cell" calls, so the
calendar code never depends on how the graph is drawn.
"""

from typing import Protocol

from gitlab_graph.contribution_calendar import (
    get_contribution_color,
    get_contribution_level,
)

TITLE = "GitLab Contribution Graph"

DAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# One glyph per intensity level, from no contributions to 30+
LEVEL_GLYPHS = ["·", "░", "▒", "▓", "█"]


class GraphRenderer(Protocol):
    """Surface the contribution graph is drawn on."""

    def add_column(self) -> None: ...

    def add_cell(self, day: str, count: int, level: int, color: str) -> None: ...


def render_contribution_graph(
    renderer: GraphRenderer,
    calendar: dict[str, int],
    weeks: int,
    day_of_week: int,
) -> None:
    """
    Lay out a calendar as columns of day cells.

    Args:
        renderer: Surface receiving the columns and cells
        calendar: Calendar from build_calendar(), oldest day first
        weeks: Number of columns
        day_of_week: Today's weekday (0 = Sunday); the last column stops there
    """
    entries = list(calendar.items())

    for column in range(weeks):
        renderer.add_column()

        for row in range(7):
            index = column * 7 + row
            if index >= len(entries):
                return

            day, count = entries[index]
            renderer.add_cell(
                day,
                count,
                get_contribution_level(count),
                get_contribution_color(count),
            )

            if column == weeks - 1 and row == day_of_week:
                break


class GridRenderer:
    """Collects the graph as plain data for JSON and HTML output."""

    def __init__(self):
        self.columns: list[list[dict]] = []

    def add_column(self) -> None:
        self.columns.append([])

    def add_cell(self, day: str, count: int, level: int, color: str) -> None:
        self.columns[-1].append(
            {
                "date": day,
                "count": count,
                "level": level,
                "color": color,
            }
        )


class TextGraphRenderer:
    """Draws the graph with block characters for the terminal."""

    def __init__(self):
        self.columns: list[list[int]] = []

    def add_column(self) -> None:
        self.columns.append([])

    def add_cell(self, day: str, count: int, level: int, color: str) -> None:
        self.columns[-1].append(level)

    def render(self, title: str = TITLE) -> str:
        """Return the graph as text, one row per weekday."""
        lines = [title, ""]

        for row in range(7):
            cells = []
            for column in self.columns:
                cells.append(LEVEL_GLYPHS[column[row]] if row < len(column) else " ")
            lines.append(f"  {DAY_LABELS[row]} " + " ".join(cells).rstrip())

        lines.append("")
        lines.append("  Less " + " ".join(LEVEL_GLYPHS) + " More")
        return "\n".join(lines)


def format_error(message: str) -> str:
    """Format an error the way the widget displays it."""
    return f"{TITLE}\n\nError: {message}"
