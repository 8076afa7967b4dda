"""Cart totals step definitions."""

from decimal import Decimal

from pytest_bdd import scenarios, given, when, then, parsers

from cart_totals import Cart, CartConfig, ConvergenceError, Product
from cart_totals.promotions import (
    CartFixedSumDiscount,
    CartPercentageDiscount,
    FreeItemPromotion,
    GiftPromotion,
    PromotionTemplate,
)

from ...fixtures import AlwaysGrowingPromotion


# Link to feature file
scenarios("../cart_totals.feature")


def _promotion(context, cart_id):
    return next(p for p in context["cart"].get_promotions() if p.cart_id == cart_id)


# =============================================================================
# Given
# =============================================================================


@given("an empty cart")
def given_empty_cart(context):
    context["cart"] = Cart()
    context["items"] = {}


@given(parsers.parse("a restart limit of {limit:d}"))
def given_restart_limit(context, limit):
    context["cart"] = Cart(config=CartConfig(max_iterations=limit))


@given(parsers.parse('{quantity:d} units of "{cart_id}" at {price:d}'))
def given_units(context, quantity, cart_id, price):
    item = Product(cart_id, unit_price=price)
    context["items"][cart_id] = item
    context["cart"].add_item(item, quantity)


@given(parsers.parse('a percentage discount "{cart_id}" with multiplier "{multiplier}"'))
def given_percentage(context, cart_id, multiplier):
    context["cart"].add_promotion(CartPercentageDiscount(cart_id, multiplier))


@given(parsers.parse('a fixed discount "{cart_id}" of "{amount}"'))
def given_fixed(context, cart_id, amount):
    context["cart"].add_promotion(CartFixedSumDiscount(cart_id, amount))


@given(parsers.parse('one free "{item_id}"'))
def given_free_item(context, item_id):
    item = context["items"][item_id]
    context["cart"].add_promotion(FreeItemPromotion(f"FREE-{item_id}", item))


@given(parsers.parse('a gift promotion "{cart_id}" giving "{item_id}" at {price:d}'))
def given_gift(context, cart_id, item_id, price):
    gift = Product(item_id, unit_price=price)
    context["items"][item_id] = gift
    context["cart"].add_promotion(GiftPromotion(cart_id, gift))


@given(parsers.parse('an exclusive promotion "{cart_id}" excluding "{cart_type}"'))
def given_exclusive(context, cart_id, cart_type):
    context["cart"].add_promotion(PromotionTemplate(cart_id, "exclusive", excludes=[cart_type]))


@given(parsers.parse('a promotion "{cart_id}" that keeps adding "{item_id}"'))
def given_growing(context, cart_id, item_id):
    context["cart"].add_promotion(AlwaysGrowingPromotion(cart_id, Product(item_id, unit_price=1)))


# =============================================================================
# When
# =============================================================================


@when("totals are computed")
def when_totals_computed(context):
    try:
        context["totals"] = context["cart"].perform_totals()
    except ConvergenceError as e:
        context["error"] = e


# =============================================================================
# Then
# =============================================================================


@then(parsers.parse('the total should be "{amount}"'))
def then_total(context, amount):
    assert context["totals"].get_total() == Decimal(amount)


@then(parsers.parse('the rounded total should be "{amount}"'))
def then_rounded_total(context, amount):
    assert str(context["totals"].get_rounded_total()) == amount


@then(parsers.parse('the subtotal before promotions should be "{amount}"'))
def then_subtotal(context, amount):
    assert context["totals"].get_subtotal() == Decimal(amount)


@then(parsers.parse('the subtotal of "{item_id}" should be "{amount}"'))
def then_item_subtotal(context, item_id, amount):
    item = context["items"][item_id]
    assert context["totals"].get_subtotal_for_item(item) == Decimal(amount)


@then(parsers.parse('"{item_id}" should have a price impact of "{amount}" from "{promotion_id}"'))
def then_price_impact(context, item_id, amount, promotion_id):
    impacts = [
        impact.price_impact
        for impact in context["totals"].get_item_promo_impacts()
        if impact.item.cart_id == item_id and impact.promotion.cart_id == promotion_id
    ]
    assert impacts == [Decimal(amount)]


@then(parsers.parse('"{promotion_id}" should account for "{amount}"'))
def then_promotion_total(context, promotion_id, amount):
    promotion = _promotion(context, promotion_id)
    assert context["totals"].get_subtotal_for_promotion(promotion) == Decimal(amount)


@then(parsers.parse('the priced quantity of "{item_id}" should be {quantity:d}'))
def then_priced_quantity(context, item_id, quantity):
    item = context["items"][item_id]
    assert context["totals"].get_item_quantity(item) == quantity


@then(parsers.parse('the cart should not contain "{item_id}"'))
def then_cart_lacks(context, item_id):
    assert not context["cart"].has_item(item_id)


@then(parsers.parse('the active promotions should be "{promotion_ids}"'))
def then_active_promotions(context, promotion_ids):
    active = [p.cart_id for p in context["totals"].get_promotions()]
    assert ",".join(active) == promotion_ids


@then("computing totals should fail to converge")
def then_no_convergence(context):
    assert isinstance(context.get("error"), ConvergenceError)
    assert "totals" not in context
