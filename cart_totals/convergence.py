"""Fixed-point reduction of the promotion list and the item list.

Both stages walk the promotions in order and let each one rewrite the
list under reduction. Any net change restarts the walk from the first
promotion, so every promotion sees the final list before the stage ends.
The walk stops once a full pass makes no change.

A hook that keeps reporting changes would loop forever; each stage gives
up with :class:`ConvergenceError` after ``max_iterations`` restarts.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import structlog

from .errors import ConvergenceError
from .identity import item_diff, item_key, keyed_items, keyed_promotions, promotion_diff
from .records import ModifiedCartData, PromoImpact

if TYPE_CHECKING:
    from .counter import ItemCounter
    from .interfaces import Promotion

logger = structlog.get_logger(__name__)


def _impact_for(impacts: dict[str, PromoImpact], promotion: Promotion) -> PromoImpact:
    key = item_key(promotion)
    impact = impacts.get(key)
    if impact is None:
        impact = PromoImpact(promotion=promotion)
        impacts[key] = impact
    return impact


def _check_limit(stage: str, restarts: int, max_iterations: int, key: str) -> None:
    if restarts > max_iterations:
        logger.warning(
            "convergence_limit_exceeded", stage=stage, max_iterations=max_iterations, promotion=key
        )
        raise ConvergenceError(stage, max_iterations, key)


def converge_promotions(
    promotions: list[Promotion],
    counters: list[ItemCounter],
    impacts: dict[str, PromoImpact],
    max_iterations: int,
) -> list[Promotion]:
    """Stage 1: let promotions include or exclude each other.

    Args:
        promotions: Eligible promotions, in cart order.
        counters: Item counters as they were before any stage ran. Every
            snapshot handed to the hooks uses these, not later results.
        impacts: Receives one PromoImpact per promotion that changed the list.
        max_iterations: Restart limit.

    Returns:
        The converged promotion list.
    """
    working = list(keyed_promotions(promotions).values())
    restarts = 0
    i = 0
    while i < len(working):
        promotion = working[i]
        key = item_key(promotion)
        others = [p for p in working if item_key(p) != key]
        snapshot = ModifiedCartData.from_counters(counters, working)

        result = list(promotion.reduce_promotions(snapshot, others))
        result.append(promotion)
        result = list(keyed_promotions(result).values())

        diff = promotion_diff(working, result)
        if not diff:
            i += 1
            continue

        restarts += 1
        _check_limit("promotion convergence", restarts, max_iterations, key)
        _impact_for(impacts, promotion).promotion_differences.extend(diff)
        logger.debug(
            "promotion_list_changed",
            promotion=key,
            added=[item_key(d.promotion) for d in diff if d.difference > 0],
            removed=[item_key(d.promotion) for d in diff if d.difference < 0],
        )
        working = result
        i = 0

    logger.debug("promotions_converged", promotions=len(working), restarts=restarts)
    return working


def converge_items(
    promotions: list[Promotion],
    counters: list[ItemCounter],
    impacts: dict[str, PromoImpact],
    max_iterations: int,
) -> list[ItemCounter]:
    """Stage 2: let promotions inject, drop or resize item counters.

    Counters with a quantity of zero or less are dropped after every hook
    and duplicate keys are merged by summing, so hooks may return sloppy
    lists. Changes are measured as per-key quantity deltas.
    """
    working = keyed_items(c for c in counters if c.quantity > 0)
    restarts = 0
    i = 0
    while i < len(promotions):
        promotion = promotions[i]
        current = [replace(c) for c in working.values()]
        snapshot = ModifiedCartData.from_counters(current, promotions)

        result = promotion.reduce_items(snapshot, current)
        reduced = keyed_items(c for c in result if c.quantity > 0)

        diff = item_diff(working, reduced)
        if not diff:
            i += 1
            continue

        key = item_key(promotion)
        restarts += 1
        _check_limit("item convergence", restarts, max_iterations, key)
        _impact_for(impacts, promotion).item_differences.extend(diff)
        logger.debug(
            "item_list_changed",
            promotion=key,
            changes={item_key(d.item): d.difference for d in diff},
        )
        working = reduced
        i = 0

    logger.debug("items_converged", items=len(working), restarts=restarts)
    return list(working.values())
