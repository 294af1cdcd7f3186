"""Card catalog, card grants and sponsor card programs"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from rcard_gateway.api.dependencies import (
    get_card_service,
    get_current_user_id,
    get_policy_catalog,
    get_request_id,
)
from rcard_gateway.api.v1.schemas import (
    CardApplyRequest,
    CardGrantSchema,
    CatalogResponse,
    PolicySchema,
    SponsorCardListResponse,
    SponsorCardRequest,
    SponsorCardSchema,
    UserCardSchema,
    UserCardsResponse,
)
from rcard_gateway.domain.cards import CardService
from rcard_gateway.domain.policies import PolicyCatalog
from rcard_gateway.infrastructure.database.session import get_db, unit_of_work

router = APIRouter()


@router.get("/cards/catalog", response_model=CatalogResponse)
def get_catalog(catalog: PolicyCatalog = Depends(get_policy_catalog)):
    """Static card programs grouped by card type"""
    return CatalogResponse(
        catalog={
            group: [PolicySchema.from_domain(policy) for policy in policies]
            for group, policies in catalog.groups().items()
        },
        default=PolicySchema.from_domain(catalog.default),
    )


@router.get("/cards", response_model=UserCardsResponse)
def list_my_cards(
    user_id: int = Depends(get_current_user_id),
    cards: CardService = Depends(get_card_service),
):
    grants = cards.user_cards(user_id)
    policies = cards.policies_for(grants)
    return UserCardsResponse(
        cards=[
            UserCardSchema(
                **CardGrantSchema.from_domain(grant).model_dump(),
                policy=PolicySchema.from_domain(policies[grant.id]),
            )
            for grant in grants
        ]
    )


@router.post("/cards/apply", response_model=UserCardSchema, status_code=201)
def apply_for_card(
    body: CardApplyRequest,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    cards: CardService = Depends(get_card_service),
):
    """Add a card to the caller's wallet; its policy governs later loans"""
    with unit_of_work(db, get_request_id(request)):
        grant = cards.apply(user_id, body.card_id, body.card_identifier, body.card_type)

    return UserCardSchema(
        **CardGrantSchema.from_domain(grant).model_dump(),
        policy=PolicySchema.from_domain(cards.lookup_policy(grant.id)),
    )


@router.get("/cards/public/{public_id}", response_model=SponsorCardSchema)
def get_public_card(public_id: str, cards: CardService = Depends(get_card_service)):
    """Sponsor card details for its public landing page"""
    card = cards.get_by_public_id(public_id)
    return SponsorCardSchema.from_domain(card, cards.effective_policy(card))


@router.post("/sponsor/cards", response_model=SponsorCardSchema, status_code=201)
def create_sponsor_card(
    body: SponsorCardRequest,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    cards: CardService = Depends(get_card_service),
):
    with unit_of_work(db, get_request_id(request)):
        card = cards.create_sponsor_card(user_id, body.model_dump(mode="json"))

    return SponsorCardSchema.from_domain(card, cards.effective_policy(card))


@router.get("/sponsor/cards", response_model=SponsorCardListResponse)
def list_sponsor_cards(
    user_id: int = Depends(get_current_user_id),
    cards: CardService = Depends(get_card_service),
):
    return SponsorCardListResponse(
        cards=[
            SponsorCardSchema.from_domain(card, cards.effective_policy(card))
            for card in cards.list_sponsor_cards(user_id)
        ]
    )
