"""PostgreSQL schema definitions."""

from typing import Final

CHANGE_CHANNEL: Final[str] = "vyapar_changes"

# Writable columns per collection; anything else in a record is rejected
COLLECTION_COLUMNS: Final[dict[str, tuple[str, ...]]] = {
    "profiles": (
        "user_id", "full_name", "business_name", "email", "phone", "address",
    ),
    "customers": (
        "user_id", "name", "email", "phone", "address", "gst_number",
        "total_purchases", "outstanding_balance",
    ),
    "inventory": (
        "user_id", "name", "sku", "description", "category", "quantity", "unit",
        "purchase_price", "selling_price", "low_stock_threshold",
    ),
    "invoices": (
        "user_id", "invoice_number", "customer_id", "status", "issue_date",
        "due_date", "subtotal", "tax_rate", "tax_amount", "discount_amount",
        "total_amount", "notes",
    ),
    "invoice_items": (
        "invoice_id", "inventory_id", "description", "quantity", "unit_price",
        "total_price",
    ),
}

ENABLE_PGCRYPTO_EXTENSION: Final[str] = "CREATE EXTENSION IF NOT EXISTS pgcrypto;"

CREATE_PROFILES_TABLE: Final[str] = """
CREATE TABLE IF NOT EXISTS profiles (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id TEXT UNIQUE,
    full_name TEXT,
    business_name TEXT,
    email TEXT,
    phone TEXT,
    address TEXT,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);
"""

CREATE_CUSTOMERS_TABLE: Final[str] = """
CREATE TABLE IF NOT EXISTS customers (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id TEXT,
    name TEXT NOT NULL,
    email TEXT,
    phone TEXT,
    address TEXT,
    gst_number TEXT,
    total_purchases NUMERIC(14, 2) NOT NULL DEFAULT 0,
    outstanding_balance NUMERIC(14, 2) NOT NULL DEFAULT 0,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);
"""

CREATE_INVENTORY_TABLE: Final[str] = """
CREATE TABLE IF NOT EXISTS inventory (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id TEXT,
    name TEXT NOT NULL,
    sku TEXT,
    description TEXT,
    category TEXT,
    quantity INTEGER NOT NULL DEFAULT 0,
    unit TEXT NOT NULL DEFAULT 'pcs',
    purchase_price NUMERIC(14, 2) NOT NULL DEFAULT 0,
    selling_price NUMERIC(14, 2) NOT NULL DEFAULT 0,
    low_stock_threshold INTEGER NOT NULL DEFAULT 10,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);
"""

CREATE_INVOICES_TABLE: Final[str] = """
CREATE TABLE IF NOT EXISTS invoices (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id TEXT,
    invoice_number TEXT NOT NULL UNIQUE,
    customer_id UUID REFERENCES customers (id) ON DELETE SET NULL,
    status TEXT NOT NULL DEFAULT 'draft'
        CHECK (status IN ('draft', 'sent', 'paid', 'overdue', 'cancelled')),
    issue_date DATE NOT NULL DEFAULT CURRENT_DATE,
    due_date DATE,
    subtotal NUMERIC(14, 2) NOT NULL DEFAULT 0,
    tax_rate NUMERIC(5, 2) NOT NULL DEFAULT 0,
    tax_amount NUMERIC(14, 2) NOT NULL DEFAULT 0,
    discount_amount NUMERIC(14, 2) NOT NULL DEFAULT 0,
    total_amount NUMERIC(14, 2) NOT NULL DEFAULT 0,
    notes TEXT,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);
"""

CREATE_INVOICE_ITEMS_TABLE: Final[str] = """
CREATE TABLE IF NOT EXISTS invoice_items (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    invoice_id UUID NOT NULL REFERENCES invoices (id) ON DELETE CASCADE,
    inventory_id UUID REFERENCES inventory (id) ON DELETE SET NULL,
    description TEXT NOT NULL,
    quantity INTEGER NOT NULL CHECK (quantity > 0),
    unit_price NUMERIC(14, 2) NOT NULL,
    total_price NUMERIC(14, 2) NOT NULL,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);
"""

CREATE_TABLES: Final[tuple[str, ...]] = (
    CREATE_PROFILES_TABLE,
    CREATE_CUSTOMERS_TABLE,
    CREATE_INVENTORY_TABLE,
    CREATE_INVOICES_TABLE,
    CREATE_INVOICE_ITEMS_TABLE,
)

CREATE_INVOICES_CREATED_AT_INDEX: Final[str] = """
CREATE INDEX IF NOT EXISTS idx_invoices_created_at
ON invoices (created_at DESC);
"""

CREATE_INVENTORY_QUANTITY_INDEX: Final[str] = """
CREATE INDEX IF NOT EXISTS idx_inventory_quantity
ON inventory (quantity);
"""

# Change notification: one NOTIFY per row write, JSON payload
CREATE_NOTIFY_FUNCTION: Final[str] = f"""
CREATE OR REPLACE FUNCTION vyapar_notify_change()
RETURNS TRIGGER AS $$
BEGIN
    PERFORM pg_notify(
        '{CHANGE_CHANNEL}',
        json_build_object(
            'collection', TG_TABLE_NAME,
            'kind', lower(TG_OP),
            'record_id', COALESCE(NEW.id, OLD.id)
        )::text
    );
    RETURN NULL;
END;
$$ LANGUAGE plpgsql;
"""

DROP_NOTIFY_TRIGGER: Final[str] = """
DROP TRIGGER IF EXISTS {table}_notify_change ON {table};
"""

CREATE_NOTIFY_TRIGGER: Final[str] = """
CREATE TRIGGER {table}_notify_change
AFTER INSERT OR UPDATE OR DELETE ON {table}
FOR EACH ROW EXECUTE FUNCTION vyapar_notify_change();
"""

DROP_ALL: Final[str] = """
DROP TABLE IF EXISTS invoice_items, invoices, inventory, customers, profiles CASCADE;
DROP FUNCTION IF EXISTS vyapar_notify_change() CASCADE;
"""
