"""
Mention placeholder resolution.

The compiler cannot know account identifiers, so mentions are emitted with
an ``__EMAIL__:<email>`` placeholder in their ``id``. Publishing workflows
look the emails up in their user directory and substitute the placeholders
in the serialized document before sending it. Resolution is all or
nothing: a document with a single unresolved mention is never produced.
"""

import logging
import re
from typing import Callable, Dict, List, Mapping, Optional, Union

from .inline_parser import MENTION_PLACEHOLDER_PREFIX

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(
    re.escape(MENTION_PLACEHOLDER_PREFIX) + r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"
)

MentionResolver = Union[Mapping[str, str], Callable[[str], Optional[str]]]


class UnresolvedMentionError(Exception):
    """Raised when one or more mention emails have no account identifier.

    Attributes:
        emails: Every email that could not be resolved
    """

    def __init__(self, emails: List[str]):
        self.emails = emails
        super().__init__(f"Could not resolve {len(emails)} mention(s): {', '.join(emails)}")


def find_mention_emails(serialized: str) -> List[str]:
    """
    Find the emails embedded in mention placeholders.

    Args:
        serialized: Serialized document JSON

    Returns:
        Unique emails in order of first appearance
    """
    emails: List[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(serialized):
        if match.group(1) not in emails:
            emails.append(match.group(1))
    return emails


def _lookup(resolver: MentionResolver, email: str) -> Optional[str]:
    if callable(resolver):
        return resolver(email)
    return resolver.get(email)


def resolve_mentions(serialized: str, resolver: MentionResolver) -> str:
    """
    Replace every mention placeholder with its account identifier.

    Args:
        serialized: Serialized document JSON
        resolver: Mapping or callable from email to account identifier

    Returns:
        Serialized document with all placeholders substituted

    Raises:
        UnresolvedMentionError: If any email cannot be resolved. Nothing is
            substituted in that case.
    """
    emails = find_mention_emails(serialized)
    resolved: Dict[str, str] = {}
    missing: List[str] = []

    for email in emails:
        account_id = _lookup(resolver, email)
        if account_id:
            resolved[email] = account_id
        else:
            missing.append(email)

    if missing:
        logger.error(f"Unresolved mentions: {', '.join(missing)}")
        raise UnresolvedMentionError(missing)

    for email, account_id in resolved.items():
        # Quote-terminated so one email never rewrites a longer one
        serialized = serialized.replace(f'"{MENTION_PLACEHOLDER_PREFIX}{email}"', f'"{account_id}"')
    logger.info(f"Resolved {len(resolved)} mention(s), dood!")
    return serialized
