"""Terminal review built on click prompts."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Sequence

import click

from .base import REVIEW_PROMPT, BaseReviewer, ReviewResult

if TYPE_CHECKING:
    from ..managers.delete_manager import SelectionItem


def parse_unchecked(raw: str, count: int) -> set[int]:
    """Parse a comma/space separated list of 1-based row numbers.

    Raises ValueError for anything that is not a row number in range.
    """
    rows: set[int] = set()
    for token in raw.replace(',', ' ').split():
        try:
            n = int(token)
        except ValueError:
            raise ValueError(f"Not a row number: {token}") from None
        if n < 1 or n > count:
            raise ValueError(f"Row {n} is out of range 1-{count}")
        rows.add(n)
    return rows


class ConsoleReviewer(BaseReviewer):
    """Checklist review in the terminal.

    Rows start checked; the user lists the rows to uncheck, enters the code
    when asked, and confirms. Declining the final confirmation cancels.
    """

    def __init__(self, is_high_risk: Callable[[str], bool] | None = None):
        self.is_high_risk = is_high_risk

    def present_review(self, items: "Sequence[SelectionItem]", prompt_for_code: bool) -> ReviewResult:
        click.echo(REVIEW_PROMPT)
        for n, item in enumerate(items, start=1):
            flag = ''
            if self.is_high_risk is not None and self.is_high_risk(item.category):
                flag = ' ' + click.style('[HIGH RISK]', fg='red', bold=True)
            click.echo(f"  [x] {n:>3}. {item.display_label}{flag}")

        unchecked: set[int] = set()
        if items:
            while True:
                raw = click.prompt('Rows to uncheck (blank for none)', default='', show_default=False)
                try:
                    unchecked = parse_unchecked(raw, len(items))
                    break
                except ValueError as e:
                    click.echo(f"Error: {e}", err=True)

        code = None
        if prompt_for_code:
            code = click.prompt('Code', hide_input=True, default='', show_default=False)

        checked = frozenset(item.identity for n, item in enumerate(items, start=1) if n not in unchecked)
        if not click.confirm(f"Delete {len(checked)} element(s)?", default=False):
            return ReviewResult.cancelled()
        return ReviewResult(confirmed=True, checked_identities=checked, submitted_code=code)
