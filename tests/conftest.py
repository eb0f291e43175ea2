from datetime import datetime, timezone
import uuid

import pytest

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def result(rows=None, columns=None, rowcount=None):
    """One scripted answer for a single ``cursor.execute`` call."""
    rows = list(rows or [])
    return {
        "rows": rows,
        "columns": list(columns or []),
        "rowcount": len(rows) if rowcount is None else rowcount,
    }


class FakeCursor:
    def __init__(self, script):
        self.script = script
        self.executed = []
        self.description = None
        self.rowcount = -1
        self.closed = False
        self._rows = []

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), list(params)))
        step = self.script.pop(0) if self.script else result()
        if isinstance(step, Exception):
            raise step
        self.description = [(name,) for name in step["columns"]] or None
        self._rows = list(step["rows"])
        self.rowcount = step["rowcount"]

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, *script):
        self.cursor_obj = FakeCursor(list(script))
        self.committed = False
        self.rolled_back = False

    def cursor(self):
        return self.cursor_obj

    @property
    def executed(self):
        return self.cursor_obj.executed

    def statements(self):
        return [sql for sql, _ in self.executed]

    def run_transaction(self, handler):
        try:
            value = handler(self)
        except Exception:
            self.rolled_back = True
            raise
        self.committed = True
        return value


@pytest.fixture
def fake_db(monkeypatch):
    """Install a scripted connection as ``run_transaction`` of the given modules."""

    def install(modules, *script):
        conn = FakeConnection(*script)
        for module in modules if isinstance(modules, (list, tuple)) else [modules]:
            monkeypatch.setattr(module, "run_transaction", conn.run_transaction)
        return conn

    return install


TICKET_FIELDS = [
    "id",
    "raffle_id",
    "number",
    "status",
    "buyer_name",
    "buyer_email",
    "buyer_phone",
    "transaction_id",
    "notes",
    "created_at",
    "updated_at",
]


def ticket_row(raffle_id, number, status="available", **buyer):
    return {
        "id": buyer.pop("id", uuid.uuid4()),
        "raffle_id": raffle_id,
        "number": number,
        "status": status,
        "buyer_name": buyer.get("buyer_name"),
        "buyer_email": buyer.get("buyer_email"),
        "buyer_phone": buyer.get("buyer_phone"),
        "transaction_id": buyer.get("transaction_id"),
        "notes": buyer.get("notes"),
        "created_at": NOW,
        "updated_at": NOW,
    }


def as_result(rows: list[dict], rowcount=None):
    columns = list(rows[0]) if rows else []
    return result([tuple(row.values()) for row in rows], columns, rowcount)
