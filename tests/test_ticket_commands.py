import uuid

import pg8000.dbapi as pgapi
import pytest

from conftest import as_result, result, ticket_row
from app.core.errors import BadRequestError, DataIntegrityError, NotFoundError
import app.cqrs.commands.tickets as commands
from app.models.schemas import BuyerInfo, TicketUpdate
from app.models.tickets import TicketStatus

RAFFLE_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")


def _raffle(total=3):
    return result([(RAFFLE_ID, "Moto 2024", total)], ["id", "name", "total_tickets"])


def _statuses(*pairs):
    return result(list(pairs), ["number", "status"])


def test_initialize_creates_padded_pool(fake_db):
    conn = fake_db(commands, _raffle(3), result(rowcount=0), result(rowcount=3))

    outcome = commands.initialize_tickets(RAFFLE_ID)

    assert outcome == {
        "raffle_id": str(RAFFLE_ID),
        "created": 3,
        "deleted": 0,
        "message": "Initialized 3 tickets for raffle Moto 2024",
    }
    select_sql, delete_sql, insert_sql = conn.statements()
    assert select_sql.endswith("FOR UPDATE")
    assert delete_sql.startswith("DELETE FROM tickets")
    assert "generate_series" in insert_sql
    assert conn.executed[2][1] == [RAFFLE_ID, 3, 3]
    assert conn.committed


def test_initialize_uses_wider_numbers_for_large_pools(fake_db):
    conn = fake_db(commands, _raffle(10000), result(rowcount=5), result(rowcount=10000))

    outcome = commands.initialize_tickets(RAFFLE_ID)

    assert outcome["deleted"] == 5
    assert conn.executed[2][1] == [RAFFLE_ID, 4, 10000]


def test_initialize_unknown_raffle(fake_db):
    conn = fake_db(commands, result())

    with pytest.raises(NotFoundError):
        commands.initialize_tickets(RAFFLE_ID)
    assert conn.rolled_back
    assert len(conn.executed) == 1


def test_initialize_reports_duplicate_numbers(fake_db):
    violation = pgapi.DatabaseError({"C": "23505", "M": "duplicate key value"})
    conn = fake_db(commands, _raffle(3), result(rowcount=3), violation)

    with pytest.raises(DataIntegrityError) as excinfo:
        commands.initialize_tickets(RAFFLE_ID)

    assert excinfo.value.status_code == 409
    assert "collided" in excinfo.value.detail
    assert "cleanup" not in excinfo.value.detail
    assert conn.rolled_back


def test_initialize_propagates_other_database_errors(fake_db):
    failure = pgapi.DatabaseError({"C": "57014", "M": "canceling statement"})
    fake_db(commands, _raffle(3), failure)

    with pytest.raises(pgapi.DatabaseError):
        commands.initialize_tickets(RAFFLE_ID)


def test_reserve_available_tickets(fake_db):
    conn = fake_db(
        commands,
        _raffle(),
        _statuses(("000", "available"), ("001", "available")),
        result(rowcount=2),
    )

    outcome = commands.reserve_tickets(RAFFLE_ID, ["000", "001"])

    assert outcome["reserved"] == ["000", "001"]
    update_sql, params = conn.executed[2]
    assert "SET status = 'reserved'" in update_sql
    assert update_sql.endswith("AND status = 'available'")
    assert params == [RAFFLE_ID, "000", "001"]
    assert conn.committed


def test_reserve_rejects_batch_with_unavailable_ticket(fake_db):
    conn = fake_db(
        commands,
        _raffle(),
        _statuses(("001", "reserved"), ("002", "sold")),
    )

    with pytest.raises(BadRequestError) as excinfo:
        commands.reserve_tickets(RAFFLE_ID, ["001", "002"])

    assert excinfo.value.detail["tickets"] == [
        {"number": "001", "status": "reserved"},
        {"number": "002", "status": "sold"},
    ]
    assert not any(sql.startswith("UPDATE") for sql in conn.statements())
    assert conn.rolled_back


def test_reserve_rolls_back_when_a_concurrent_request_wins(fake_db):
    conn = fake_db(
        commands,
        _raffle(),
        _statuses(("000", "available"), ("001", "available")),
        result(rowcount=1),
    )

    with pytest.raises(BadRequestError, match="Only 1 of 2"):
        commands.reserve_tickets(RAFFLE_ID, ["000", "001"])
    assert conn.rolled_back
    assert not conn.committed


def test_reserve_unknown_number(fake_db):
    fake_db(commands, _raffle(), _statuses(("000", "available")))

    with pytest.raises(NotFoundError) as excinfo:
        commands.reserve_tickets(RAFFLE_ID, ["000", "999"])
    assert excinfo.value.detail["ticket_numbers"] == ["999"]


def test_reserve_rejects_duplicate_numbers_before_touching_the_database(fake_db):
    conn = fake_db(commands)

    with pytest.raises(BadRequestError):
        commands.reserve_tickets(RAFFLE_ID, ["000", "000"])
    assert conn.executed == []


def test_complete_sale_of_reserved_ticket(fake_db):
    conn = fake_db(commands, _raffle(), _statuses(("000", "reserved")), result(rowcount=1))
    buyer = BuyerInfo(name="Ana", phone="555-0100")

    outcome = commands.complete_sale(RAFFLE_ID, ["000"], buyer)

    assert outcome["sold"] == ["000"]
    assert outcome["modified_count"] == 1
    assert outcome["buyer"]["name"] == "Ana"
    update_sql, params = conn.executed[2]
    assert "status <> 'sold'" in update_sql
    assert params[:4] == ["Ana", None, "555-0100", None]
    assert params[4:] == [RAFFLE_ID, "000"]


def test_complete_sale_refuses_already_sold_tickets(fake_db):
    conn = fake_db(
        commands, _raffle(), _statuses(("000", "available"), ("002", "sold"))
    )

    with pytest.raises(BadRequestError) as excinfo:
        commands.complete_sale(RAFFLE_ID, ["000", "002"], BuyerInfo(name="Ana"))

    assert excinfo.value.detail["ticket_numbers"] == ["002"]
    assert conn.rolled_back


def test_complete_sale_partial_update_rolls_back(fake_db):
    conn = fake_db(
        commands,
        _raffle(),
        _statuses(("000", "available"), ("001", "reserved")),
        result(rowcount=1),
    )

    with pytest.raises(BadRequestError):
        commands.complete_sale(RAFFLE_ID, ["000", "001"], BuyerInfo(name="Ana"))
    assert conn.rolled_back


def test_bulk_reset_to_available_clears_buyer_fields(fake_db):
    conn = fake_db(commands, _raffle(), result([("000",)], ["number"]))

    outcome = commands.bulk_update_status(RAFFLE_ID, ["000"], TicketStatus.AVAILABLE)

    assert outcome["modified_count"] == 1
    assert outcome["skipped"] == []
    update_sql, params = conn.executed[1]
    for field in ("buyer_name", "buyer_email", "buyer_phone", "transaction_id"):
        assert f"{field} = NULL" in update_sql
    assert params == ["available", RAFFLE_ID, "000", "available", "reserved", "sold"]


def test_bulk_update_skips_illegal_transitions(fake_db):
    conn = fake_db(commands, _raffle(), result([("000",)], ["number"]))

    outcome = commands.bulk_update_status(RAFFLE_ID, ["000", "002"], TicketStatus.RESERVED)

    assert outcome["ticket_numbers"] == ["000"]
    assert outcome["skipped"] == ["002"]
    update_sql, params = conn.executed[1]
    assert "buyer_name = NULL" not in update_sql
    assert params[-1] == "available"


def test_update_ticket_rejects_illegal_transition(fake_db):
    ticket_id = uuid.uuid4()
    conn = fake_db(commands, result([("sold",)], ["status"]))

    with pytest.raises(BadRequestError, match="sold -> reserved"):
        commands.update_ticket(ticket_id, TicketUpdate(status=TicketStatus.RESERVED))
    assert len(conn.executed) == 1


def test_update_ticket_reset_clears_buyer(fake_db):
    ticket_id = uuid.uuid4()
    updated = ticket_row(RAFFLE_ID, "000", "available", id=ticket_id, notes="refund")
    conn = fake_db(commands, result([("sold",)], ["status"]), as_result([updated]))

    ticket = commands.update_ticket(
        ticket_id, TicketUpdate(status=TicketStatus.AVAILABLE, notes="refund")
    )

    assert ticket["status"] == "available"
    assert ticket["buyer_name"] is None
    update_sql, params = conn.executed[1]
    assert "buyer_name = %s" in update_sql
    assert params == ["available", "refund", None, None, None, None, ticket_id]


def test_update_ticket_keeps_status_when_only_notes_change(fake_db):
    ticket_id = uuid.uuid4()
    updated = ticket_row(RAFFLE_ID, "000", "sold", id=ticket_id, buyer_name="Ana", notes="paid")
    conn = fake_db(commands, result([("sold",)], ["status"]), as_result([updated]))

    ticket = commands.update_ticket(ticket_id, TicketUpdate(notes="paid"))

    assert ticket["buyer_name"] == "Ana"
    assert conn.executed[1][1] == ["paid", "sold", ticket_id]


def test_update_missing_ticket(fake_db):
    fake_db(commands, result())

    with pytest.raises(NotFoundError):
        commands.update_ticket(uuid.uuid4(), TicketUpdate(notes="x"))
