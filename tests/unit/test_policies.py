"""Unit tests for the card policy catalog"""

import json
import pytest
from decimal import Decimal
from rcard_gateway.domain.policies import PolicyCatalog, PolicyDefaults, merge_policy, policy_from_mapping


def test_packaged_catalog_groups():
    catalog = PolicyCatalog.load()

    groups = catalog.groups()
    assert set(groups) == {"credit", "debit", "merchant"}
    assert [p.id for p in groups["credit"]] == ["platinum-credit", "gold-credit", "silver-credit"]
    assert catalog.default.id == "default"
    assert catalog.default.interest_rate_monthly == Decimal(15)


def test_lookup_known_card():
    catalog = PolicyCatalog.load()

    policy = catalog.lookup("gold-credit")

    assert policy.interest_rate_monthly == Decimal(10)
    assert policy.max_yearly_loans == Decimal(2000)
    assert policy.type == "credit"


def test_lookup_unknown_card_falls_back_to_default():
    catalog = PolicyCatalog.load()

    assert catalog.lookup("no-such-card") == catalog.default
    assert catalog.find("no-such-card") is None


def test_find_prefers_requested_group():
    catalog = PolicyCatalog.from_dict(
        {
            "credit": [{"id": "shared", "type": "credit", "interest_rate_monthly": 9}],
            "debit": [{"id": "shared", "type": "debit", "interest_rate_monthly": 0}],
            "default": {"id": "default"},
        }
    )

    assert catalog.find("shared", "debit").type == "debit"
    assert catalog.find("shared", "credit").type == "credit"


def test_fractional_values_stay_exact():
    catalog = PolicyCatalog.load()

    assert catalog.lookup("standard-debit").transaction_fee == Decimal("0.5")


def test_missing_fields_use_defaults():
    defaults = PolicyDefaults(min_interest_days=7, max_yearly_loans=Decimal(300), interest_rate_monthly=Decimal(4))

    policy = policy_from_mapping({"id": "bare"}, defaults)

    assert policy.min_interest_days == 7
    assert policy.max_yearly_loans == Decimal(300)
    assert policy.interest_rate_monthly == Decimal(4)
    assert policy.type == "custom"


def test_min_interest_days_must_be_positive():
    with pytest.raises(ValueError):
        policy_from_mapping({"id": "bad", "min_interest_days": 0}, PolicyDefaults())


def test_catalog_requires_default():
    with pytest.raises(ValueError):
        PolicyCatalog.from_dict({"credit": []})


def test_load_from_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            {
                "merchant": [{"id": "shop", "type": "merchant", "interest_rate_monthly": 2.5}],
                "default": {"id": "default", "interest_rate_monthly": 20},
            }
        )
    )

    catalog = PolicyCatalog.load(path)

    assert catalog.lookup("shop").interest_rate_monthly == Decimal("2.5")
    assert catalog.default.interest_rate_monthly == Decimal(20)


def test_merge_policy_overrides_non_null_fields():
    base = PolicyCatalog.load().lookup("gold-credit")

    merged = merge_policy(
        base,
        {"interest_rate_monthly": "7.5", "name": "Club Card", "description": None, "card_type": "merchant"},
    )

    assert merged.interest_rate_monthly == Decimal("7.5")
    assert merged.name == "Club Card"
    assert merged.description == base.description
    assert merged.type == "merchant"
    assert merged.max_yearly_loans == base.max_yearly_loans
