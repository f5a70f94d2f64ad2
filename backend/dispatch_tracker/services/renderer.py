"""Greedy fill-and-truncate rendering under a hard character budget."""

from collections.abc import Iterable

DEFAULT_RESERVE = 30
MARKER_TEMPLATE = "\n_...and {count} more_"


def truncation_marker(count: int) -> str:
    return MARKER_TEMPLATE.format(count=count)


def render_bounded(
    lines: Iterable[str],
    budget: int,
    header: str = "",
    footer: str = "",
    reserve: int = DEFAULT_RESERVE,
    empty_text: str | None = None,
) -> str:
    """
    Join as many lines as fit between header and footer within `budget` chars.

    A line is accepted while the running total plus the line, its newline and
    `reserve` stays under budget. The first line that does not fit stops
    acceptance; it and every later line are counted in a trailing
    "...and N more" marker. The result never exceeds the budget.

    Raises:
        ValueError: header and footer alone exceed the budget, or leave no
            room for the truncation marker when lines must be dropped
    """
    lines = list(lines)
    used = len(header) + len(footer)
    if used > budget:
        raise ValueError(f"Header and footer ({used} chars) exceed budget of {budget}")

    if not lines and empty_text is not None:
        if used + len(empty_text) <= budget:
            return header + empty_text + footer
        return header + footer

    shown: list[str] = []
    for line in lines:
        cost = len(line) + 1
        if used + cost + reserve >= budget:
            break
        shown.append(line)
        used += cost

    omitted = len(lines) - len(shown)
    body = "\n".join(shown)
    if omitted:
        marker = truncation_marker(omitted)
        # A reserve smaller than the marker must still never overflow.
        while shown and len(header) + len(body) + len(marker) + len(footer) > budget:
            shown.pop()
            omitted += 1
            body = "\n".join(shown)
            marker = truncation_marker(omitted)
        if len(header) + len(body) + len(marker) + len(footer) > budget:
            raise ValueError(
                f"Header, footer and truncation marker exceed budget of {budget}"
            )
        body += marker

    return header + body + footer
