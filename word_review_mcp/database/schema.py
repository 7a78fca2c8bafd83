"""SQLite schema definitions for the review scheduler."""

WORDS_TABLE = """
CREATE TABLE IF NOT EXISTS words (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    word TEXT NOT NULL,
    definition TEXT,
    created_at TEXT NOT NULL,
    UNIQUE (user_id, word)
);
"""

REVIEW_STATES_TABLE = """
CREATE TABLE IF NOT EXISTS review_states (
    word_id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    mode TEXT NOT NULL DEFAULT 'continuous',

    -- Continuous mode
    stage INTEGER NOT NULL DEFAULT 1,
    ease_factor REAL NOT NULL DEFAULT 2.5,
    memory_strength REAL NOT NULL DEFAULT 0.0,
    interval_days REAL NOT NULL DEFAULT 0.0,

    -- Milestone mode (JSON arrays of booleans)
    short_slots TEXT NOT NULL DEFAULT '[false, false, false]',
    long_slots TEXT NOT NULL DEFAULT '[false, false, false, false, false, false]',
    milestone_completions INTEGER NOT NULL DEFAULT 0,

    -- Counters
    review_count INTEGER NOT NULL DEFAULT 0,
    correct_count INTEGER NOT NULL DEFAULT 0,
    error_count INTEGER NOT NULL DEFAULT 0,
    mastery_level INTEGER NOT NULL DEFAULT 0,

    last_review_at TEXT,
    next_review_at TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    FOREIGN KEY (word_id) REFERENCES words(id) ON DELETE CASCADE
);
"""

REVIEW_LOG_TABLE = """
CREATE TABLE IF NOT EXISTS review_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    word_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    event TEXT NOT NULL,
    outcome TEXT,
    track TEXT,
    slot_index INTEGER,
    stage_before INTEGER,
    stage_after INTEGER,
    mastery_before INTEGER,
    mastery_after INTEGER,
    reviewed_at TEXT NOT NULL,
    FOREIGN KEY (word_id) REFERENCES words(id) ON DELETE CASCADE
);
"""

REMINDERS_TABLE = """
CREATE TABLE IF NOT EXISTS reminders (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    word_id TEXT NOT NULL,
    content TEXT NOT NULL,
    sent_at TEXT NOT NULL,
    is_read INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (word_id) REFERENCES words(id) ON DELETE CASCADE
);
"""

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_words_user ON words(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_states_user ON review_states(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_states_next_review ON review_states(user_id, next_review_at);",
    "CREATE INDEX IF NOT EXISTS idx_log_word ON review_log(word_id);",
    "CREATE INDEX IF NOT EXISTS idx_log_date ON review_log(user_id, reviewed_at);",
    "CREATE INDEX IF NOT EXISTS idx_reminders_word ON reminders(word_id, sent_at);",
]


# Columns added after the first release: (table, column, definition)
ADDED_COLUMNS = [
    ("review_states", "milestone_completions", "INTEGER NOT NULL DEFAULT 0"),
]


def create_tables(cursor) -> None:
    """Create all tables and indexes."""
    cursor.execute(WORDS_TABLE)
    cursor.execute(REVIEW_STATES_TABLE)
    cursor.execute(REVIEW_LOG_TABLE)
    cursor.execute(REMINDERS_TABLE)
    for index in INDEXES:
        cursor.execute(index)


def add_missing_columns(cursor) -> list[str]:
    """Bring tables created by an older release up to date.

    Returns the columns that were added, as "table.column".
    """
    added = []
    for table, column, definition in ADDED_COLUMNS:
        cursor.execute(f"PRAGMA table_info({table})")
        if column not in {row[1] for row in cursor.fetchall()}:
            cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")
            added.append(f"{table}.{column}")
    return added
