"""Unit tests for card grants, sponsor cards and policy resolution"""

import pytest
from decimal import Decimal
from rcard_gateway.domain.exceptions import (
    CardNotFoundError,
    DuplicateCardError,
    UserNotFoundError,
    ValidationError,
)


def test_apply_adds_card_in_order(db, card_service, make_user):
    user = make_user()

    card_service.apply(user.id, "gold-credit", "4111 1111 1111 1111", "credit")
    card_service.apply(user.id, "premium-debit", "5500 0000 0000 0004", "debit")
    db.commit()

    cards = card_service.user_cards(user.id)
    assert [c.id for c in cards] == ["gold-credit", "premium-debit"]
    assert cards[0].card_identifier == "4111 1111 1111 1111"
    assert cards[0].type == "credit"


def test_apply_same_card_twice(db, card_service, make_user):
    user = make_user()
    card_service.apply(user.id, "gold-credit", "4111", "credit")
    db.commit()

    with pytest.raises(DuplicateCardError) as exc_info:
        card_service.apply(user.id, "gold-credit", "4222", "credit")

    assert exc_info.value.reason == "duplicate_card"


def test_apply_requires_identifier(card_service, make_user):
    user = make_user()

    with pytest.raises(ValidationError):
        card_service.apply(user.id, "gold-credit", "<b></b>", "credit")


def test_apply_unknown_card_type(card_service, make_user):
    user = make_user()

    with pytest.raises(ValidationError):
        card_service.apply(user.id, "gold-credit", "4111", "prepaid")


def test_apply_unknown_user(card_service):
    with pytest.raises(UserNotFoundError):
        card_service.apply(404, "gold-credit", "4111", "credit")


def test_policies_for_held_cards(db, card_service, make_user):
    user = make_user()
    card_service.apply(user.id, "silver-credit", "4111", "credit")
    card_service.apply(user.id, "my-own-card", "9999", "custom")
    db.commit()

    policies = card_service.policies_for(card_service.user_cards(user.id))

    assert policies["silver-credit"].interest_rate_monthly == Decimal(8)
    assert policies["my-own-card"].id == "default"


def test_sponsor_card_policy_overlays_base(db, card_service, make_user):
    sponsor = make_user()

    card = card_service.create_sponsor_card(
        sponsor.id,
        {
            "name": "Campus Card",
            "public_identifier": "campus",
            "policy_id": "gold-credit",
            "interest_rate_monthly": "6",
            "max_yearly_loans": "300",
        },
    )
    db.commit()

    policy = card_service.lookup_policy("campus")
    assert card.org_id == f"org_{sponsor.id}"
    assert card.id.startswith("card_")
    assert policy.id == "campus"
    assert policy.interest_rate_monthly == Decimal(6)
    assert policy.max_yearly_loans == Decimal(300)
    assert policy.annual_fee == Decimal(300)  # inherited from gold-credit


def test_sponsor_card_generated_public_identifier(db, card_service, make_user):
    sponsor = make_user()

    card = card_service.create_sponsor_card(sponsor.id, {"name": "Club"})

    assert card.public_identifier.startswith("pub_")
    assert card_service.get_by_public_id(card.public_identifier).id == card.id


def test_sponsor_card_cannot_shadow_catalog(card_service, make_user):
    sponsor = make_user()

    with pytest.raises(DuplicateCardError):
        card_service.create_sponsor_card(sponsor.id, {"name": "Fake", "public_identifier": "gold-credit"})


def test_sponsor_card_public_identifier_unique(db, card_service, make_user):
    sponsor = make_user()
    card_service.create_sponsor_card(sponsor.id, {"name": "One", "public_identifier": "club"})
    db.commit()

    with pytest.raises(DuplicateCardError):
        card_service.create_sponsor_card(sponsor.id, {"name": "Two", "public_identifier": "club"})


def test_list_sponsor_cards_scoped_to_sponsor(db, card_service, make_user):
    sponsor = make_user()
    other = make_user()
    card_service.create_sponsor_card(sponsor.id, {"name": "Mine", "public_identifier": "mine"})
    card_service.create_sponsor_card(other.id, {"name": "Theirs", "public_identifier": "theirs"})
    db.commit()

    assert [c.public_identifier for c in card_service.list_sponsor_cards(sponsor.id)] == ["mine"]


def test_get_by_public_id_missing(card_service):
    with pytest.raises(CardNotFoundError):
        card_service.get_by_public_id("nope")


def test_loan_against_sponsor_card_uses_its_policy(db, card_service, lifecycle, make_user):
    sponsor = make_user()
    borrower = make_user()
    card_service.create_sponsor_card(
        sponsor.id,
        {"name": "Tight", "public_identifier": "tight", "max_yearly_loans": "200", "min_interest_days": 3},
    )
    db.commit()

    preview = lifecycle.preview(borrower.id, "tight", Decimal(150), 3)

    assert preview.policy.id == "tight"
    assert preview.interest.effective_days == 3
    assert preview.yearly_limit.max == Decimal(200)
