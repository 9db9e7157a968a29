"""Exceptions raised by strict-mode callers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catl_parser.models import Diagnostic


class CatlSyntaxError(ValueError):
    """Raised by :meth:`Tree.raise_for_errors` when parsing produced errors.

    Parameters
    ----------
    diagnostics : Sequence[Diagnostic]
        The error diagnostics, in source order.

    Examples
    --------
    >>> from catl_parser import parse
    >>> try:
    ...     parse('"G":320003:"oops').raise_for_errors()
    ... except CatlSyntaxError as exc:
    ...     print(exc)
    1 error(s):
      1:12: error: unterminated string literal
    """

    def __init__(self, diagnostics: Sequence[Diagnostic]) -> None:
        self.diagnostics = tuple(diagnostics)
        lines = [f"{len(self.diagnostics)} error(s):"]
        lines.extend(f"  {d}" for d in self.diagnostics)
        msg = "\n".join(lines)
        super().__init__(msg)
