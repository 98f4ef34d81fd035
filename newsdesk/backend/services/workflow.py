"""
Article Workflow.

The moderation state machine as a transition table. Services ask for the
target status of an action and get InvalidTransitionError for anything
the table does not list.
"""

from enum import StrEnum

from newsdesk.backend.core.exceptions import InvalidTransitionError
from newsdesk.backend.models.article import ArticleStatus


class ArticleAction(StrEnum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"


TRANSITIONS: dict[ArticleAction, tuple[frozenset[str], ArticleStatus]] = {
    ArticleAction.SUBMIT: (
        frozenset({ArticleStatus.DRAFT, ArticleStatus.REJECTED}),
        ArticleStatus.PENDING,
    ),
    ArticleAction.APPROVE: (frozenset({ArticleStatus.PENDING}), ArticleStatus.PUBLISHED),
    ArticleAction.REJECT: (frozenset({ArticleStatus.PENDING}), ArticleStatus.REJECTED),
}


def target_status(current: str, action: ArticleAction) -> ArticleStatus:
    """
    Resolve the status an action leads to.

    Raises:
        InvalidTransitionError: If the action is not allowed from `current`
    """
    sources, target = TRANSITIONS[action]
    if current not in sources:
        raise InvalidTransitionError(current, target)
    return target


def can_transition(current: str, action: ArticleAction) -> bool:
    return current in TRANSITIONS[action][0]
