"""Match engine selecting and running the first applicable rewrite rule."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .rules import URL_RULES

if TYPE_CHECKING:
    from mbbot.domain.model import Entity

    from .result import RewriteResult
    from .rules import RuleTable

log = getLogger(__name__)


def rewrite(entity: Entity, rules: RuleTable = URL_RULES) -> RewriteResult | None:
    """Return the changes the first rule matching ``entity.name`` wants to make.

    ``None`` means nothing needs to be done: either no rule matched, the matching rule
    aborted, or its result would leave the entity unchanged. Rules only see the
    entity's immutable relationships, so the originals stay available for diffing.
    """

    found = rules.find(entity.name)
    if found is None:
        return None
    rule, match = found
    log.debug("%s: %s matched rule %s (%s)", entity.id, entity.name, rule.name, rule.kind)

    result = rule.transform(match, entity.relationships)
    if result is None:
        log.debug("%s: rule %s aborted", entity.id, rule.name)
        return None
    if result.is_noop(entity.name):
        return None
    return result
