from typing import Sequence

from .models import PlatformDescriptor, RuleAction, RuleClause


def clause_matches(clause: RuleClause, platform: PlatformDescriptor) -> bool:
    """A clause matches when its os.name or its os.arch equals the host's."""
    if clause.os_name is not None and clause.os_name == platform.name:
        return True
    if clause.os_arch is not None and clause.os_arch == platform.architecture:
        return True
    return False


def is_included(rules: Sequence[RuleClause], platform: PlatformDescriptor) -> bool:
    """
    Decides whether a library guarded by `rules` is used on `platform`.

    Every clause is a constraint: an allow clause that does not match, or a
    disallow clause that does, excludes the library and stops evaluation.
    This is not the "last matching rule wins" reading used by the official
    launcher; a bare {"action": "allow"} clause therefore excludes.
    """
    for clause in rules:
        matches = clause_matches(clause, platform)
        if clause.action is RuleAction.ALLOW and not matches:
            return False
        if clause.action is RuleAction.DISALLOW and matches:
            return False
    return True
