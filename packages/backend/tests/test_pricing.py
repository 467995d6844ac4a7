"""Commission policy and plan table."""

import pytest

from bizdir.services.pricing import (
    PLANS,
    can_upgrade,
    commission_for,
    get_plan,
    total_commission,
)


def test_commissions_for_sample_amounts():
    assert [commission_for(a) for a in [100, 250, 333]] == [20, 50, 67]
    assert total_commission([100, 250, 333]) == 137


@pytest.mark.parametrize("amount,expected", [(None, 20), (0, 20), (2999, 600), (5988, 1198)])
def test_commission_defaults_and_plan_amounts(amount, expected):
    assert commission_for(amount) == expected


def test_rounds_to_nearest_rupee():
    assert commission_for(62) == 12
    assert commission_for(63) == 13
    assert commission_for(2388) == 478


def test_unknown_plan_falls_back_to_basic():
    assert get_plan("GOLD") is PLANS["BASIC"]
    assert get_plan(None).amount == 100
    assert get_plan("hero").amount == 5988


def test_upgrade_order():
    assert can_upgrade("BASIC", "PREMIUM")
    assert not can_upgrade("HERO", "BASIC")
    assert not can_upgrade("BASIC", "GOLD")


def test_featured_placements():
    placements = PLANS["FEATURED"].placements()
    assert placements["home_page_banner"] and placements["top_slider"]
    assert not placements["hero"]
