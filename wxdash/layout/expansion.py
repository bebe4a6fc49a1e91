"""Size thresholds that switch a widget into its expanded content."""

import logging
from typing import Any, Dict, Mapping, Optional

from .types import ExpansionThreshold

logger = logging.getLogger(__name__)

EXPANSION_THRESHOLDS: Dict[str, ExpansionThreshold] = {
    t.id: t
    for t in (
        ExpansionThreshold("models", expand_w=3, expand_h=2),
        ExpansionThreshold("brackets", expand_w=2, expand_h=3),
        ExpansionThreshold("map", expand_w=2, expand_h=2),
        ExpansionThreshold("discussion", expand_w=3, expand_h=3),
        ExpansionThreshold("nearby", expand_w=3, expand_h=2),
        ExpansionThreshold("alerts", expand_w=2, expand_h=2),
        ExpansionThreshold("wind", expand_w=2, expand_h=2),
        ExpansionThreshold("resolution", expand_w=2, expand_h=2),
        ExpansionThreshold("rounding", expand_w=2, expand_h=2),
    )
}


def should_expand(
    widget_id: str,
    w: int,
    h: int,
    thresholds: Optional[Mapping[str, ExpansionThreshold]] = None,
) -> bool:
    """Whether a widget of size w x h shows its expanded content.

    Either axis reaching its threshold is enough. Widgets without a
    threshold never expand.
    """
    table = EXPANSION_THRESHOLDS if thresholds is None else thresholds
    threshold = table.get(widget_id)
    if threshold is None:
        return False
    return w >= threshold.expand_w or h >= threshold.expand_h


def thresholds_with_overrides(
    overrides: Mapping[str, Mapping[str, Any]],
    base: Optional[Mapping[str, ExpansionThreshold]] = None,
) -> Dict[str, ExpansionThreshold]:
    """Threshold table with ``expand_w``/``expand_h`` overrides applied.

    An override may add a threshold for a widget that had none, but only
    when both axes are given.
    """
    table = dict(EXPANSION_THRESHOLDS if base is None else base)
    for widget_id, fields in overrides.items():
        expand_w = fields.get("expand_w")
        expand_h = fields.get("expand_h")
        if expand_w is None and expand_h is None:
            continue
        current = table.get(widget_id)
        if current is None and (expand_w is None or expand_h is None):
            logger.warning(f"Ignoring partial expansion override for {widget_id}")
            continue
        table[widget_id] = ExpansionThreshold(
            widget_id,
            expand_w=int(expand_w if expand_w is not None else current.expand_w),  # type: ignore[union-attr]
            expand_h=int(expand_h if expand_h is not None else current.expand_h),  # type: ignore[union-attr]
        )
    return table
