"""FTS5 index over articles.title / articles.text_content and its sync triggers.

The index is an external-content FTS5 table: it stores only tokens and reads
column values back from `articles` for snippets. Triggers on `articles` keep
it in step with every committed row, so no write path can skip the index.
"""

from pocket.constants.search_defaults import FTS_TABLE

CREATE_FTS_TABLE = f"""
CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE} USING fts5(
    title,
    text_content,
    content='articles',
    content_rowid='id'
)
"""

FTS_TRIGGERS = (
    f"""
    CREATE TRIGGER IF NOT EXISTS articles_fts_insert AFTER INSERT ON articles BEGIN
        INSERT INTO {FTS_TABLE}(rowid, title, text_content)
        VALUES (new.id, new.title, new.text_content);
    END
    """,
    f"""
    CREATE TRIGGER IF NOT EXISTS articles_fts_delete AFTER DELETE ON articles BEGIN
        INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, title, text_content)
        VALUES ('delete', old.id, old.title, old.text_content);
    END
    """,
    # Fires only when an indexed column is written; archive/read updates skip it.
    f"""
    CREATE TRIGGER IF NOT EXISTS articles_fts_update AFTER UPDATE OF title, text_content ON articles BEGIN
        INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, title, text_content)
        VALUES ('delete', old.id, old.title, old.text_content);
        INSERT INTO {FTS_TABLE}(rowid, title, text_content)
        VALUES (new.id, new.title, new.text_content);
    END
    """,
)

REBUILD_FTS = f"INSERT INTO {FTS_TABLE}({FTS_TABLE}) VALUES ('rebuild')"

FTS_EXISTS = f"SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = '{FTS_TABLE}'"
