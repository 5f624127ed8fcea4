"""Helpers for building JQL queries."""

# Characters with a meaning in Jira text search (``~``); a literal one must be backslash-escaped.
TEXT_SEARCH_RESERVED_CHARACTERS = frozenset('\\+-&|!(){}[]^~*?:/')


def quote_jql_string(value: str) -> str:
    """Quote a value as a JQL string literal, escaping backslashes and double quotes."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def escape_text_search_term(value: str) -> str:
    """Escape the characters Jira text search treats as query syntax.

    The result still has to be quoted with ``quote_jql_string``, which doubles
    the escaping backslashes as JQL requires (``[`` ends up as ``\\\\[``).
    """
    return "".join(f"\\{char}" if char in TEXT_SEARCH_RESERVED_CHARACTERS else char for char in value)


def build_open_issue_search_jql(project_key: str, summary: str, done_status: str = "Done") -> str:
    """Build the JQL matching not-done issues of a project whose summary contains ``summary``.

    Newest issues come first so that a fork created by an earlier run is
    considered before the issue it was forked from.
    """
    return (
        f"project = {quote_jql_string(project_key)} "
        f"AND summary ~ {quote_jql_string(escape_text_search_term(summary))} "
        f"AND status != {quote_jql_string(done_status)} "
        "ORDER BY created DESC"
    )


def build_issue_key_jql(issue_key: str) -> str:
    """Build the JQL matching exactly one issue key."""
    return f"key = {quote_jql_string(issue_key)}"
