import json
import uuid

import pytest

from conftest import NOW, result
from app.core.errors import BadRequestError, NotFoundError
import app.cqrs.commands.content as content_commands
import app.cqrs.commands.settings as settings_commands
import app.cqrs.queries.content as content_queries
import app.cqrs.queries.settings as settings_queries
from app.models.schemas import FAQUpdate, WhatsAppSettingsUpdate

HERO = {
    "title": "Gran rifa",
    "subtitle": "Participa",
    "description": "Compra tus boletos",
    "image_url": "/uploads/hero.png",
    "button_text": "Comprar",
}


def test_website_content_treats_missing_blocks_as_null(monkeypatch):
    def fake_fetch_one(sql, params=()):
        if params == ("hero",):
            return {"data": json.dumps(HERO), "updated_at": NOW}
        return None

    monkeypatch.setattr(content_queries, "fetch_one", fake_fetch_one)
    monkeypatch.setattr(content_queries, "fetch_all", lambda sql, params=(): [])

    content = content_queries.website_content()

    assert content["hero"]["title"] == "Gran rifa"
    assert content["hero"]["updated_at"] == NOW
    assert content["prize_carousel"] is None
    assert content["info_ticker"] is None
    assert content["faqs"] == []
    assert content["payment_methods"] == []


def test_single_block_lookup_is_not_found_when_absent(monkeypatch):
    monkeypatch.setattr(content_queries, "fetch_one", lambda sql, params=(): None)

    with pytest.raises(NotFoundError, match="Info ticker not found"):
        content_queries.get_block(content_queries.INFO_TICKER)


def test_patch_block_merges_into_stored_document(fake_db):
    merged = {**HERO, "title": "Nueva rifa"}
    conn = fake_db(
        content_commands,
        result([(HERO,)], ["data"]),
        result([(merged, NOW)], ["data", "updated_at"]),
    )

    block = content_commands.patch_block(content_queries.HERO, {"title": "Nueva rifa"})

    assert block["title"] == "Nueva rifa"
    stored = json.loads(conn.executed[1][1][0])
    assert stored == merged


def test_patch_block_requires_existing_document(fake_db):
    fake_db(content_commands, result())

    with pytest.raises(NotFoundError, match="Hero content not found"):
        content_commands.patch_block(content_queries.HERO, {"title": "x"})


def test_save_block_upserts(fake_db):
    conn = fake_db(content_commands, result([(HERO, NOW)], ["data", "updated_at"]))

    content_commands.save_block(content_queries.HERO, HERO)

    sql, params = conn.executed[0]
    assert "ON CONFLICT (key) DO UPDATE" in sql
    assert params[0] == "hero"


def test_faq_order_maps_to_sort_order_column(fake_db):
    faq_id = uuid.uuid4()
    row = (faq_id, "¿Cuándo?", "Pronto", 3, True, NOW, NOW)
    columns = ["id", "question", "answer", "sort_order", "is_active", "created_at", "updated_at"]
    conn = fake_db(content_commands, result([row], columns))

    faq = content_commands.update_faq(faq_id, FAQUpdate(order=3))

    assert faq["order"] == 3
    assert "sort_order = %s" in conn.executed[0][0]


def test_reorder_assigns_positions(fake_db):
    first, second = uuid.uuid4(), uuid.uuid4()
    conn = fake_db(content_commands, result(rowcount=1), result(rowcount=1), result([], ["id"]))

    content_commands.reorder_faqs([second, first])

    assert conn.executed[0][1] == [0, second]
    assert conn.executed[1][1] == [1, first]


def test_reorder_unknown_entry_rolls_back(fake_db):
    conn = fake_db(content_commands, result(rowcount=1), result(rowcount=0))

    with pytest.raises(NotFoundError):
        content_commands.reorder_payment_methods([uuid.uuid4(), uuid.uuid4()])
    assert conn.rolled_back


def test_reorder_rejects_duplicates():
    entry = uuid.uuid4()
    with pytest.raises(BadRequestError):
        content_commands.reorder_faqs([entry, entry])


def test_whatsapp_number_prefers_stored_settings(monkeypatch):
    stored = {"whatsapp": {"from_phone_number": "+57 300 000 0000"}}
    monkeypatch.setattr(
        settings_queries, "find_block", lambda key: {"data": stored, "updated_at": NOW}
    )
    assert settings_queries.whatsapp_number() == "+57 300 000 0000"

    monkeypatch.setattr(settings_queries, "find_block", lambda key: None)
    assert settings_queries.whatsapp_number() == (settings_queries.settings.whatsapp_number or None)


def test_update_whatsapp_settings_merges(fake_db):
    current = {"whatsapp": {"enabled": False, "api_key": "old"}}
    updated = {"whatsapp": {**settings_queries.DEFAULT_WHATSAPP, "enabled": True, "api_key": "old"}}
    conn = fake_db(
        settings_commands,
        result(rowcount=0),
        result([(current, NOW)], ["data", "updated_at"]),
        result([(updated, NOW)], ["data", "updated_at"]),
    )

    out = settings_commands.update_whatsapp_settings(WhatsAppSettingsUpdate(enabled=True))

    assert out["whatsapp"]["enabled"] is True
    assert out["whatsapp"]["api_key"] == "old"
    stored = json.loads(conn.executed[2][1][0])
    assert stored["whatsapp"]["api_key"] == "old"
    assert stored["whatsapp"]["enabled"] is True


def test_test_message_needs_enabled_configuration(monkeypatch):
    monkeypatch.setattr(
        settings_commands,
        "get_or_create_settings",
        lambda: {"whatsapp": dict(settings_queries.DEFAULT_WHATSAPP), "updated_at": NOW},
    )
    assert settings_commands.send_test_message("3001234567")["success"] is False

    configured = {
        **settings_queries.DEFAULT_WHATSAPP,
        "enabled": True,
        "api_key": "k",
        "phone_number_id": "1",
    }
    monkeypatch.setattr(
        settings_commands,
        "get_or_create_settings",
        lambda: {"whatsapp": configured, "updated_at": NOW},
    )
    assert settings_commands.send_test_message("3001234567") == {
        "success": True,
        "message": "Test message sent to 3001234567",
    }
