"""Card policy catalog - static card programs loaded from configuration"""

import json
import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from rcard_gateway.domain.models import Policy

logger = logging.getLogger(__name__)

PACKAGED_CATALOG = Path(__file__).resolve().parent.parent / "data" / "card_catalog.json"

_MONEY_FIELDS = ("annual_fee", "interest_rate_monthly", "transaction_fee", "max_yearly_loans")
_TEXT_FIELDS = ("name", "description", "brand_primary", "brand_secondary", "benefit_key")


@dataclass(frozen=True)
class PolicyDefaults:
    """Values used when a catalog entry leaves a field out"""

    min_interest_days: int = 5
    max_yearly_loans: Decimal = Decimal(1000)
    interest_rate_monthly: Decimal = Decimal(10)


def _to_decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def policy_from_mapping(data: Mapping[str, Any], defaults: PolicyDefaults) -> Policy:
    """Build a Policy from a catalog entry"""
    min_days = int(data.get("min_interest_days", defaults.min_interest_days))
    if min_days < 1:
        raise ValueError(f"min_interest_days must be >= 1 (policy {data.get('id')!r})")

    return Policy(
        id=str(data["id"]),
        type=str(data.get("type", "custom")),
        annual_fee=_to_decimal(data.get("annual_fee", 0)),
        interest_rate_monthly=_to_decimal(data.get("interest_rate_monthly", defaults.interest_rate_monthly)),
        transaction_fee=_to_decimal(data.get("transaction_fee", 0)),
        max_yearly_loans=_to_decimal(data.get("max_yearly_loans", defaults.max_yearly_loans)),
        min_interest_days=min_days,
        **{key: str(data.get(key, "")) for key in _TEXT_FIELDS},
    )


def merge_policy(base: Policy, overrides: Mapping[str, Any]) -> Policy:
    """Overlay non-null fields of a sponsor spec onto a base policy"""
    changes: Dict[str, Any] = {}
    for key in _MONEY_FIELDS:
        if overrides.get(key) is not None:
            changes[key] = _to_decimal(overrides[key])
    for key in _TEXT_FIELDS:
        if overrides.get(key) is not None:
            changes[key] = str(overrides[key])
    if overrides.get("min_interest_days") is not None:
        changes["min_interest_days"] = max(int(overrides["min_interest_days"]), 1)
    if overrides.get("card_type") is not None:
        changes["type"] = str(overrides["card_type"])
    return replace(base, **changes)


class PolicyCatalog:
    """
    Immutable catalog of card policies grouped by card type.

    lookup() never fails: unknown identifiers resolve to the default policy.
    """

    def __init__(self, groups: Dict[str, List[Policy]], default: Policy):
        self._groups = {card_type: list(policies) for card_type, policies in groups.items()}
        self._default = default
        self._by_id = {p.id: p for policies in self._groups.values() for p in policies}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], defaults: PolicyDefaults | None = None) -> "PolicyCatalog":
        defaults = defaults or PolicyDefaults()
        if "default" not in data:
            raise ValueError("Card catalog must define a 'default' policy")

        groups = {
            card_type: [policy_from_mapping(entry, defaults) for entry in entries]
            for card_type, entries in data.items()
            if card_type != "default"
        }
        return cls(groups, policy_from_mapping(data["default"], defaults))

    @classmethod
    def load(cls, path: str | Path | None = None, defaults: PolicyDefaults | None = None) -> "PolicyCatalog":
        """Load the catalog from a JSON file (packaged catalog when path is None)"""
        catalog_path = Path(path) if path else PACKAGED_CATALOG
        data = json.loads(catalog_path.read_text(encoding="utf-8"), parse_float=Decimal)
        catalog = cls.from_dict(data, defaults)
        logger.info(
            "Card catalog loaded",
            extra={"catalog_path": str(catalog_path), "policy_count": len(catalog._by_id)},
        )
        return catalog

    @property
    def default(self) -> Policy:
        return self._default

    def groups(self) -> Dict[str, List[Policy]]:
        return {card_type: list(policies) for card_type, policies in self._groups.items()}

    def find(self, card_id: str, card_type: Optional[str] = None) -> Optional[Policy]:
        """Exact match only; None when the identifier is not in the catalog"""
        if card_type and card_type in self._groups:
            for policy in self._groups[card_type]:
                if policy.id == card_id:
                    return policy
        return self._by_id.get(card_id)

    def lookup(self, card_id: str, card_type: Optional[str] = None) -> Policy:
        return self.find(str(card_id), card_type) or self._default
