"""Aggregator source file (``modules/mod.rs``) rendering."""
from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from modctl.data import get_data_path

TEMPLATE_NAME = "aggregator.rs.j2"


@lru_cache(maxsize=1)
def _environment() -> Environment:
    # Control blocks sit on their own lines in the template; trimming keeps
    # them from leaving blank lines behind.
    return Environment(
        loader=FileSystemLoader(str(get_data_path("templates"))),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        autoescape=False,
    )


def render_aggregator(module_ids: Iterable[str], *, feature_prefix: str = "module-") -> str:
    """Render one gated ``pub mod`` and one gated ``pub use`` per module, sorted by id.

    The output holds no timestamps, so equal input renders byte-identical text.
    """
    ids = sorted(set(module_ids))
    if not ids:
        raise ValueError("An aggregator needs at least one module")
    template = _environment().get_template(TEMPLATE_NAME)
    return template.render(module_ids=ids, feature_prefix=feature_prefix)


__all__ = ["TEMPLATE_NAME", "render_aggregator"]
