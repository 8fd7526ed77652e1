SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version   INTEGER NOT NULL,
    applied_at REAL NOT NULL
);

-- Accounts: one row per wallet
CREATE TABLE IF NOT EXISTS accounts (
    wallet_address          TEXT PRIMARY KEY,
    membership_level        TEXT NOT NULL DEFAULT 'Based'
                            CHECK (membership_level IN ('Based', 'SuperBased', 'Legendary')),
    enb_balance             REAL NOT NULL DEFAULT 0.0 CHECK (enb_balance >= 0),
    total_earned            REAL NOT NULL DEFAULT 0.0,
    invitation_code         TEXT UNIQUE,
    max_invitation_uses     INTEGER NOT NULL DEFAULT 5,
    current_invitation_uses INTEGER NOT NULL DEFAULT 0,
    is_activated            INTEGER NOT NULL DEFAULT 0,
    inviter_wallet          TEXT,
    transaction_hash        TEXT,
    last_daily_claim_time   REAL,
    consecutive_days        INTEGER NOT NULL DEFAULT 0 CHECK (consecutive_days >= 0),
    version                 INTEGER NOT NULL DEFAULT 0,
    created_at              REAL NOT NULL,
    activated_at            REAL,
    updated_at              REAL NOT NULL,
    CHECK (current_invitation_uses <= max_invitation_uses)
);

-- Invitation usage: append-only redemption log
CREATE TABLE IF NOT EXISTS invitation_usage (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    invitation_code TEXT NOT NULL,
    used_by         TEXT NOT NULL,
    inviter_wallet  TEXT NOT NULL,
    used_at         REAL NOT NULL,
    UNIQUE (invitation_code, used_by),
    FOREIGN KEY (used_by) REFERENCES accounts(wallet_address),
    FOREIGN KEY (inviter_wallet) REFERENCES accounts(wallet_address)
);

-- Transactions: audit trail for all balance changes
CREATE TABLE IF NOT EXISTS transactions (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    wallet_address TEXT NOT NULL,
    type           TEXT NOT NULL CHECK (type IN ('credit', 'debit')),
    amount         REAL NOT NULL,
    balance_before REAL NOT NULL,
    balance_after  REAL NOT NULL,
    description    TEXT NOT NULL DEFAULT '',
    reference_id   TEXT NOT NULL DEFAULT '',
    created_at     REAL NOT NULL,
    FOREIGN KEY (wallet_address) REFERENCES accounts(wallet_address)
);

-- Indexes for common queries
CREATE INDEX IF NOT EXISTS idx_accounts_activated ON accounts(is_activated);
CREATE INDEX IF NOT EXISTS idx_accounts_level ON accounts(membership_level);
CREATE INDEX IF NOT EXISTS idx_accounts_balance ON accounts(enb_balance);
CREATE INDEX IF NOT EXISTS idx_accounts_earned ON accounts(total_earned);
CREATE INDEX IF NOT EXISTS idx_accounts_streak ON accounts(consecutive_days);
CREATE INDEX IF NOT EXISTS idx_usage_code_time ON invitation_usage(invitation_code, used_at);
CREATE INDEX IF NOT EXISTS idx_usage_used_by ON invitation_usage(used_by);
CREATE INDEX IF NOT EXISTS idx_transactions_wallet ON transactions(wallet_address, created_at);
"""
