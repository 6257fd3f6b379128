"""Query arguments passed along with Trello requests."""

from __future__ import annotations

from collections.abc import Iterable, Mapping


class Arguments(dict):
    """Query string arguments for a single request (``{"fields": "name,desc"}``)"""

    def to_params(self) -> dict[str, str]:
        """Render values the way Trello expects them in a query string"""
        params: dict[str, str] = {}
        for key, value in self.items():
            if value is None:
                continue
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
            elif isinstance(value, (list, tuple)):
                params[key] = ",".join(str(v) for v in value)
            else:
                params[key] = str(value)
        return params


def defaults() -> Arguments:
    """Arguments that ask Trello for its default fields"""
    return Arguments()


def flatten_arguments(extra_args: Iterable[Mapping[str, object] | None] | None) -> Arguments:
    """Merge several argument mappings into one; later mappings win."""
    merged = Arguments()
    for args in extra_args or ():
        if args:
            merged.update(args)
    return merged
