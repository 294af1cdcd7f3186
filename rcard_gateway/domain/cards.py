"""Card grants and sponsor-defined card programs"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping

from rcard_gateway.domain.accounts import sanitize_text
from rcard_gateway.domain.exceptions import (
    CardNotFoundError,
    DuplicateCardError,
    UserNotFoundError,
    ValidationError,
)
from rcard_gateway.domain.models import CARD_TYPES, CardGrant, Policy, SponsorCard
from rcard_gateway.domain.policies import PolicyCatalog, merge_policy
from rcard_gateway.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


def org_id_for(user_id: int) -> str:
    return f"org_{user_id}"


class CardService:
    """
    Resolves card identifiers to policies and manages what users hold.

    Policy resolution order: static catalog, then sponsor cards by public
    identifier, then the catalog default.
    """

    def __init__(
        self,
        users,
        grants,
        sponsor_cards,
        catalog: PolicyCatalog,
        now: Callable[[], datetime] = utc_now,
    ):
        self.users = users
        self.grants = grants
        self.sponsor_cards = sponsor_cards
        self.catalog = catalog
        self.now = now

    def lookup_policy(self, card_id: str) -> Policy:
        card_id = str(card_id)
        policy = self.catalog.find(card_id)
        if policy is not None:
            return policy

        sponsor_card = self.sponsor_cards.get_by_public_id(card_id)
        if sponsor_card is not None:
            return self.effective_policy(sponsor_card)

        return self.catalog.default

    def effective_policy(self, card: SponsorCard) -> Policy:
        """Sponsor spec overlaid on its base catalog policy"""
        base = self.catalog.lookup(card.spec.get("policy_id") or "default")
        return replace(merge_policy(base, card.spec), id=card.public_identifier)

    def apply(self, user_id: int, card_id: str, card_identifier: str, card_type: str = "custom") -> CardGrant:
        card_id = sanitize_text(str(card_id))
        card_identifier = sanitize_text(card_identifier)
        if not card_id or not card_identifier:
            raise ValidationError("Card ID and identifier required")
        if card_type not in CARD_TYPES:
            raise ValidationError(f"Unknown card type: {card_type}")

        user = self.users.get_user(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")

        if any(grant.id == card_id for grant in user.cards):
            raise DuplicateCardError(f"Card {card_id} already added")

        grant = CardGrant(id=card_id, card_identifier=card_identifier, type=card_type, applied_at=self.now())
        self.grants.add_grant(user_id, grant)
        logger.info("Card granted", extra={"user_id": user_id, "card_id": card_id, "card_type": card_type})
        return grant

    def user_cards(self, user_id: int) -> List[CardGrant]:
        user = self.users.get_user(user_id)
        return user.cards if user is not None else []

    def policies_for(self, cards: List[CardGrant]) -> Dict[str, Policy]:
        return {grant.id: self.lookup_policy(grant.id) for grant in cards}

    def create_sponsor_card(self, sponsor_user_id: int, spec: Mapping[str, Any]) -> SponsorCard:
        public_identifier = spec.get("public_identifier") or f"pub_{uuid.uuid4().hex[:13]}"

        if self.catalog.find(public_identifier) is not None:
            raise DuplicateCardError(f"Public identifier {public_identifier} is reserved by the catalog")
        if self.sponsor_cards.get_by_public_id(public_identifier) is not None:
            raise DuplicateCardError(f"Public identifier {public_identifier} already in use")

        card = SponsorCard(
            id=f"card_{uuid.uuid4().hex[:13]}",
            org_id=org_id_for(sponsor_user_id),
            public_identifier=public_identifier,
            spec={**spec, "public_identifier": public_identifier},
            created_at=self.now(),
        )
        self.sponsor_cards.save_card(card)
        logger.info(
            "Sponsor card created",
            extra={"org_id": card.org_id, "sponsor_card_id": card.id, "public_identifier": public_identifier},
        )
        return card

    def get_by_public_id(self, public_identifier: str) -> SponsorCard:
        card = self.sponsor_cards.get_by_public_id(sanitize_text(public_identifier))
        if card is None:
            raise CardNotFoundError("Card not found")
        return card

    def list_sponsor_cards(self, sponsor_user_id: int) -> List[SponsorCard]:
        return self.sponsor_cards.list_by_org(org_id_for(sponsor_user_id))
