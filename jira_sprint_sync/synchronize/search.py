"""Looks up existing open issues that a synchronization run may reuse."""

import structlog

from jira_sprint_sync.jira.abc import JiraClientBase
from jira_sprint_sync.jira.jql import build_open_issue_search_jql
from jira_sprint_sync.schemas.jira import IssueRef

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def search_existing_issues(jira: JiraClientBase, project_key: str, summary: str) -> list[IssueRef]:
    """Return not-done issues of a project whose summary contains ``summary``, newest first."""
    jql = build_open_issue_search_jql(project_key, summary)
    logger.debug("Searching for existing issues", jql=jql)
    issues = await jira.search_issues(jql)
    logger.info("Searched for existing issues", project_key=project_key, summary=summary, issue_count=len(issues))
    return issues


def select_existing_issue(issues: list[IssueRef], summary: str) -> IssueRef | None:
    """Pick the issue a run should reconcile against.

    The summary search is a contains match, so an issue whose summary equals
    the requested one (ignoring case and surrounding whitespace) is preferred.
    Otherwise the first result is used.
    """
    if not issues:
        return None
    wanted = summary.strip().casefold()
    for issue in issues:
        if issue.summary.strip().casefold() == wanted:
            return issue
    return issues[0]


def select_related_issues(issues: list[IssueRef], selected: IssueRef | None, summary: str) -> list[IssueRef]:
    """Return the other open issues whose summary equals the requested one.

    These are forks created by earlier runs, or the issue a fork was taken
    from. Their content is already tracked and is not written again.
    """
    if selected is None:
        return []
    wanted = summary.strip().casefold()
    return [issue for issue in issues if issue.key != selected.key and issue.summary.strip().casefold() == wanted]
