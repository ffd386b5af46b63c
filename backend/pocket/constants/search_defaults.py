"""Full-text search constants shared by the schema and the query builders."""

FTS_TABLE = "articles_fts"

# Markers wrapped around matched tokens in search snippets
SNIPPET_OPEN = "<mark>"
SNIPPET_CLOSE = "</mark>"
SNIPPET_ELLIPSIS = "..."

# Fragments of SQLite error messages produced by a malformed MATCH expression
FTS_QUERY_ERRORS: tuple[str, ...] = (
    "fts5: syntax error",
    "unterminated string",
    "no such column",
    "unknown special query",
    "fts5: column queries are not supported",
)
