from __future__ import annotations

from datetime import datetime
from decimal import Decimal
import uuid
from typing import ClassVar, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from app.core.policy import Role
from app.models.tickets import TicketStatus

MAX_TICKETS_PER_REQUEST = 100


class HealthResponse(BaseModel):
    status: str
    time: datetime


class MigrationRunResponse(BaseModel):
    status: str
    applied_at: datetime


class OperationResult(BaseModel):
    success: bool
    message: str


class PartialUpdate(BaseModel):
    """Partial update body.

    Fields may be omitted, but those named in ``not_nullable`` may not be sent
    as null.
    """

    not_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def _reject_nulls(cls, data):
        if isinstance(data, dict):
            nulls = [name for name in cls.not_nullable if name in data and data[name] is None]
            if nulls:
                raise ValueError(f"{', '.join(nulls)} may not be null")
        return data


# Users and auth


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=60)
    password: str = Field(..., min_length=6, max_length=128)


class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=60)
    password: str = Field(..., min_length=6, max_length=128)
    full_name: Optional[str] = Field(None, max_length=120)
    email: Optional[EmailStr] = None
    role: Role = Role.USER


class UserUpdate(PartialUpdate):
    not_nullable = ("username", "password", "role", "is_active")

    username: Optional[str] = Field(None, min_length=3, max_length=60)
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    full_name: Optional[str] = Field(None, max_length=120)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=6, max_length=128)


class UserOut(BaseModel):
    id: str
    username: str
    role: Role
    full_name: Optional[str] = None
    email: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class LoginResponse(BaseModel):
    user: UserOut
    access_token: str
    token_type: str = "bearer"


class PaginatedUsers(BaseModel):
    data: list[UserOut]
    current_page: int
    total_pages: int
    total_items: int


# Raffles and promotions


class RaffleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    prize: str = Field(..., min_length=1, max_length=500)
    total_tickets: int = Field(..., gt=0, le=100000)
    ticket_price: Decimal = Field(..., gt=0)
    draw_method: str = Field(..., min_length=1, max_length=200)
    is_active: bool = True


class RaffleUpdate(PartialUpdate):
    not_nullable = ("name", "prize", "total_tickets", "ticket_price", "draw_method", "is_active")

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    prize: Optional[str] = Field(None, min_length=1, max_length=500)
    total_tickets: Optional[int] = Field(None, gt=0, le=100000)
    ticket_price: Optional[Decimal] = Field(None, gt=0)
    draw_method: Optional[str] = Field(None, min_length=1, max_length=200)
    is_active: Optional[bool] = None


class RaffleOut(BaseModel):
    id: str
    name: str
    prize: str
    total_tickets: int
    ticket_price: Decimal
    draw_method: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PaginatedRaffles(BaseModel):
    data: list[RaffleOut]
    current_page: int
    total_pages: int
    total_items: int


class PromotionCreate(BaseModel):
    raffle_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., gt=0)
    description: str = Field(..., min_length=1, max_length=300)


class PromotionUpdate(PartialUpdate):
    not_nullable = ("quantity", "price", "description")

    quantity: Optional[int] = Field(None, gt=0)
    price: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = Field(None, min_length=1, max_length=300)


class PromotionOut(BaseModel):
    id: str
    raffle_id: str
    quantity: int
    price: Decimal
    description: str
    created_at: datetime
    updated_at: datetime


class ActiveRaffleDetails(BaseModel):
    raffle: RaffleOut
    promotions: list[PromotionOut]


# Tickets


class TicketOut(BaseModel):
    id: str
    raffle_id: str
    number: str
    status: TicketStatus
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    buyer_phone: Optional[str] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ActiveRaffleWithTickets(ActiveRaffleDetails):
    tickets: list[TicketOut]


class PaginatedTickets(BaseModel):
    data: list[TicketOut]
    current_page: int
    total_pages: int
    total_items: int


class TicketNumbersRequest(BaseModel):
    ticket_numbers: list[str] = Field(..., min_length=1, max_length=MAX_TICKETS_PER_REQUEST)


class BuyerInfo(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=40)
    transaction_id: Optional[str] = Field(None, max_length=120)


class SaleRequest(TicketNumbersRequest):
    buyer: BuyerInfo


class BulkStatusUpdate(TicketNumbersRequest):
    status: TicketStatus


class TicketUpdate(PartialUpdate):
    not_nullable = ("status",)

    status: Optional[TicketStatus] = None
    buyer_name: Optional[str] = Field(None, max_length=120)
    buyer_email: Optional[str] = Field(None, max_length=200)
    buyer_phone: Optional[str] = Field(None, max_length=40)
    transaction_id: Optional[str] = Field(None, max_length=120)
    notes: Optional[str] = Field(None, max_length=1000)


class InitializeResponse(BaseModel):
    raffle_id: str
    created: int
    deleted: int
    message: str


class ReservationResponse(BaseModel):
    raffle_id: str
    reserved: list[str]
    message: str


class SaleResponse(BaseModel):
    raffle_id: str
    sold: list[str]
    modified_count: int
    buyer: BuyerInfo
    message: str


class BulkStatusResponse(BaseModel):
    raffle_id: str
    status: TicketStatus
    modified_count: int
    ticket_numbers: list[str]
    skipped: list[str]


class StatusSummary(BaseModel):
    available: int = 0
    reserved: int = 0
    sold: int = 0


class TicketVerification(BaseModel):
    ticket: TicketOut
    raffle_name: str
    prize: str


class QuoteRequest(TicketNumbersRequest):
    buyer_name: Optional[str] = Field(None, max_length=120)
    buyer_phone: Optional[str] = Field(None, max_length=40)


class QuoteBundle(BaseModel):
    quantity: int
    price: Decimal
    count: int
    description: str


class QuoteResponse(BaseModel):
    raffle_id: str
    ticket_numbers: list[str]
    quantity: int
    unit_price: Decimal
    singles: int
    bundles: list[QuoteBundle]
    total_price: Decimal
    message: str
    whatsapp_url: Optional[str] = None


# Content


class HeroContent(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    subtitle: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1, max_length=2000)
    image_url: str = Field(..., min_length=1, max_length=500)
    button_text: Optional[str] = Field(None, max_length=60)


class HeroContentUpdate(PartialUpdate):
    not_nullable = ("title", "subtitle", "description", "image_url")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    subtitle: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    image_url: Optional[str] = Field(None, min_length=1, max_length=500)
    button_text: Optional[str] = Field(None, max_length=60)


class HeroContentOut(HeroContent):
    updated_at: datetime


class PrizeCarousel(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    images: list[str] = Field(default_factory=list)


class PrizeCarouselUpdate(PartialUpdate):
    not_nullable = ("title", "description", "images")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    images: Optional[list[str]] = None


class PrizeCarouselOut(PrizeCarousel):
    updated_at: datetime


class InfoTicker(BaseModel):
    ticket_price: str = Field(..., min_length=1, max_length=100)
    draw_date: str = Field(..., min_length=1, max_length=100)
    announcement_channel: str = Field(..., min_length=1, max_length=200)
    additional_info: Optional[str] = Field(None, max_length=500)


class InfoTickerUpdate(PartialUpdate):
    not_nullable = ("ticket_price", "draw_date", "announcement_channel")

    ticket_price: Optional[str] = Field(None, min_length=1, max_length=100)
    draw_date: Optional[str] = Field(None, min_length=1, max_length=100)
    announcement_channel: Optional[str] = Field(None, min_length=1, max_length=200)
    additional_info: Optional[str] = Field(None, max_length=500)


class InfoTickerOut(InfoTicker):
    updated_at: datetime


class FAQCreate(BaseModel):
    question: str = Field(..., min_length=1, max_length=500)
    answer: str = Field(..., min_length=1, max_length=4000)
    order: int = Field(0, ge=0)
    is_active: bool = True


class FAQUpdate(PartialUpdate):
    not_nullable = ("question", "answer", "order", "is_active")

    question: Optional[str] = Field(None, min_length=1, max_length=500)
    answer: Optional[str] = Field(None, min_length=1, max_length=4000)
    order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class FAQOut(FAQCreate):
    id: str
    created_at: datetime
    updated_at: datetime


class PaymentMethodCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str = Field(..., min_length=1, max_length=1000)
    image_url: str = Field(..., min_length=1, max_length=500)
    order: int = Field(0, ge=0)
    is_active: bool = True


class PaymentMethodUpdate(PartialUpdate):
    not_nullable = ("name", "description", "image_url", "order", "is_active")

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    image_url: Optional[str] = Field(None, min_length=1, max_length=500)
    order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class PaymentMethodOut(PaymentMethodCreate):
    id: str
    created_at: datetime
    updated_at: datetime


class ReorderRequest(BaseModel):
    ordered_ids: list[uuid.UUID] = Field(..., min_length=1)


class WebsiteContent(BaseModel):
    hero: Optional[HeroContentOut] = None
    prize_carousel: Optional[PrizeCarouselOut] = None
    info_ticker: Optional[InfoTickerOut] = None
    faqs: list[FAQOut]
    payment_methods: list[PaymentMethodOut]


# Settings


class WhatsAppSettings(BaseModel):
    enabled: bool = False
    api_key: Optional[str] = None
    phone_number_id: Optional[str] = None
    from_phone_number: Optional[str] = None
    notification_template: Optional[str] = None


class WhatsAppSettingsUpdate(PartialUpdate):
    not_nullable = ("enabled",)

    enabled: Optional[bool] = None
    api_key: Optional[str] = Field(None, max_length=500)
    phone_number_id: Optional[str] = Field(None, max_length=60)
    from_phone_number: Optional[str] = Field(None, max_length=40)
    notification_template: Optional[str] = Field(None, max_length=2000)


class SettingsOut(BaseModel):
    whatsapp: WhatsAppSettings
    updated_at: datetime


class WhatsAppTestRequest(BaseModel):
    phone_number: str = Field(..., min_length=5, max_length=40)


# Uploads


class StoredFile(BaseModel):
    filename: str
    url: str


class UploadedFile(StoredFile):
    original_name: Optional[str] = None
    size: int
    content_type: Optional[str] = None


class UploadedFiles(BaseModel):
    files: list[UploadedFile]


class StoredFiles(BaseModel):
    files: list[StoredFile]
