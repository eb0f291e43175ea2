from __future__ import annotations

STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS raffles (
        id uuid PRIMARY KEY,
        name text NOT NULL UNIQUE,
        prize text NOT NULL,
        total_tickets int NOT NULL CHECK (total_tickets > 0),
        ticket_price numeric(12,2) NOT NULL CHECK (ticket_price > 0),
        draw_method text NOT NULL,
        is_active boolean NOT NULL DEFAULT false,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now()
    );
    """,
    # At most one active raffle, enforced by the storage layer as well.
    """
    CREATE UNIQUE INDEX IF NOT EXISTS raffles_single_active_idx
        ON raffles (is_active) WHERE is_active;
    """,
    """
    CREATE TABLE IF NOT EXISTS tickets (
        id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
        raffle_id uuid NOT NULL REFERENCES raffles(id) ON DELETE CASCADE,
        number text NOT NULL,
        status text NOT NULL DEFAULT 'available'
            CHECK (status IN ('available', 'reserved', 'sold')),
        buyer_name text,
        buyer_email text,
        buyer_phone text,
        transaction_id text,
        notes text,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now(),
        UNIQUE (raffle_id, number)
    );
    """,
    "CREATE INDEX IF NOT EXISTS tickets_raffle_status_idx ON tickets (raffle_id, status);",
    """
    CREATE TABLE IF NOT EXISTS promotions (
        id uuid PRIMARY KEY,
        raffle_id uuid NOT NULL REFERENCES raffles(id) ON DELETE CASCADE,
        quantity int NOT NULL CHECK (quantity > 0),
        price numeric(12,2) NOT NULL CHECK (price > 0),
        description text NOT NULL,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now()
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id uuid PRIMARY KEY,
        username text NOT NULL UNIQUE,
        password_hash text NOT NULL,
        password_salt text NOT NULL,
        role text NOT NULL DEFAULT 'user' CHECK (role IN ('admin', 'user', 'seller')),
        full_name text,
        email text,
        is_active boolean NOT NULL DEFAULT true,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now()
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS faqs (
        id uuid PRIMARY KEY,
        question text NOT NULL,
        answer text NOT NULL,
        sort_order int NOT NULL DEFAULT 0,
        is_active boolean NOT NULL DEFAULT true,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now()
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS payment_methods (
        id uuid PRIMARY KEY,
        name text NOT NULL,
        description text NOT NULL,
        image_url text NOT NULL,
        sort_order int NOT NULL DEFAULT 0,
        is_active boolean NOT NULL DEFAULT true,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now()
    );
    """,
    # Hero banner, prize carousel, info ticker and settings: one row per key.
    """
    CREATE TABLE IF NOT EXISTS content_blocks (
        key text PRIMARY KEY,
        data jsonb NOT NULL,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now()
    );
    """,
)


def ensure_schema(conn) -> None:
    cur = conn.cursor()
    for statement in STATEMENTS:
        cur.execute(statement)
    conn.commit()
    cur.close()
