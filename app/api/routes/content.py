import uuid

from fastapi import APIRouter, Depends

from app.api.dependencies import require_capability, require_db
from app.core.policy import Capability
from app.cqrs.commands import content as content_commands
from app.cqrs.queries import content as content_queries
from app.models.schemas import (
    FAQCreate,
    FAQOut,
    FAQUpdate,
    HeroContent,
    HeroContentOut,
    HeroContentUpdate,
    InfoTicker,
    InfoTickerOut,
    InfoTickerUpdate,
    OperationResult,
    PaymentMethodCreate,
    PaymentMethodOut,
    PaymentMethodUpdate,
    PrizeCarousel,
    PrizeCarouselOut,
    PrizeCarouselUpdate,
    ReorderRequest,
    WebsiteContent,
)

router = APIRouter(prefix="/content", tags=["content"])

can_write = Depends(require_capability(Capability.CONTENT_WRITE))


@router.get("/website-content", response_model=WebsiteContent)
def website_content():
    require_db()
    return content_queries.website_content()


# Hero banner


@router.get("/hero", response_model=HeroContentOut)
def get_hero():
    require_db()
    return content_queries.get_block(content_queries.HERO)


@router.put("/hero", response_model=HeroContentOut, dependencies=[can_write])
def save_hero(payload: HeroContent):
    require_db()
    return content_commands.save_block(content_queries.HERO, payload.model_dump())


@router.patch("/hero", response_model=HeroContentOut, dependencies=[can_write])
def patch_hero(payload: HeroContentUpdate):
    require_db()
    return content_commands.patch_block(
        content_queries.HERO, payload.model_dump(exclude_unset=True)
    )


# Prize carousel


@router.get("/prize-carousel", response_model=PrizeCarouselOut)
def get_prize_carousel():
    require_db()
    return content_queries.get_block(content_queries.PRIZE_CAROUSEL)


@router.put("/prize-carousel", response_model=PrizeCarouselOut, dependencies=[can_write])
def save_prize_carousel(payload: PrizeCarousel):
    require_db()
    return content_commands.save_block(content_queries.PRIZE_CAROUSEL, payload.model_dump())


@router.patch("/prize-carousel", response_model=PrizeCarouselOut, dependencies=[can_write])
def patch_prize_carousel(payload: PrizeCarouselUpdate):
    require_db()
    return content_commands.patch_block(
        content_queries.PRIZE_CAROUSEL, payload.model_dump(exclude_unset=True)
    )


# Info ticker


@router.get("/info-ticker", response_model=InfoTickerOut)
def get_info_ticker():
    require_db()
    return content_queries.get_block(content_queries.INFO_TICKER)


@router.put("/info-ticker", response_model=InfoTickerOut, dependencies=[can_write])
def save_info_ticker(payload: InfoTicker):
    require_db()
    return content_commands.save_block(content_queries.INFO_TICKER, payload.model_dump())


@router.patch("/info-ticker", response_model=InfoTickerOut, dependencies=[can_write])
def patch_info_ticker(payload: InfoTickerUpdate):
    require_db()
    return content_commands.patch_block(
        content_queries.INFO_TICKER, payload.model_dump(exclude_unset=True)
    )


# FAQs


@router.get("/faqs", response_model=list[FAQOut])
def list_faqs():
    require_db()
    return content_queries.list_faqs()


@router.put("/faqs/reorder", response_model=list[FAQOut], dependencies=[can_write])
def reorder_faqs(payload: ReorderRequest):
    require_db()
    return content_commands.reorder_faqs(payload.ordered_ids)


@router.get("/faqs/{faq_id}", response_model=FAQOut)
def get_faq(faq_id: uuid.UUID):
    require_db()
    return content_queries.get_faq(faq_id)


@router.post("/faqs", response_model=FAQOut, status_code=201, dependencies=[can_write])
def create_faq(payload: FAQCreate):
    require_db()
    return content_commands.create_faq(payload)


@router.put("/faqs/{faq_id}", response_model=FAQOut, dependencies=[can_write])
def update_faq(faq_id: uuid.UUID, payload: FAQUpdate):
    require_db()
    return content_commands.update_faq(faq_id, payload)


@router.delete("/faqs/{faq_id}", response_model=OperationResult, dependencies=[can_write])
def delete_faq(faq_id: uuid.UUID):
    require_db()
    return content_commands.delete_faq(faq_id)


# Payment methods


@router.get("/payment-methods", response_model=list[PaymentMethodOut])
def list_payment_methods():
    require_db()
    return content_queries.list_payment_methods()


@router.put(
    "/payment-methods/reorder", response_model=list[PaymentMethodOut], dependencies=[can_write]
)
def reorder_payment_methods(payload: ReorderRequest):
    require_db()
    return content_commands.reorder_payment_methods(payload.ordered_ids)


@router.get("/payment-methods/{method_id}", response_model=PaymentMethodOut)
def get_payment_method(method_id: uuid.UUID):
    require_db()
    return content_queries.get_payment_method(method_id)


@router.post(
    "/payment-methods", response_model=PaymentMethodOut, status_code=201, dependencies=[can_write]
)
def create_payment_method(payload: PaymentMethodCreate):
    require_db()
    return content_commands.create_payment_method(payload)


@router.put(
    "/payment-methods/{method_id}", response_model=PaymentMethodOut, dependencies=[can_write]
)
def update_payment_method(method_id: uuid.UUID, payload: PaymentMethodUpdate):
    require_db()
    return content_commands.update_payment_method(method_id, payload)


@router.delete(
    "/payment-methods/{method_id}", response_model=OperationResult, dependencies=[can_write]
)
def delete_payment_method(method_id: uuid.UUID):
    require_db()
    return content_commands.delete_payment_method(method_id)
