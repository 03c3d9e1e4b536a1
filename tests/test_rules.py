"""Tests for rules — per-library platform gating."""

import pytest

from ametrine.models import PlatformDescriptor, RuleAction, RuleClause
from ametrine.rules import clause_matches, is_included

LINUX = PlatformDescriptor(name='linux', architecture='x64')

allow = RuleAction.ALLOW
disallow = RuleAction.DISALLOW


def test_no_rules_is_included():
    assert is_included([], LINUX)


@pytest.mark.parametrize("rules,expected", [
    ([RuleClause(allow, os_name='linux')], True),
    ([RuleClause(allow, os_name='osx')], False),
    ([RuleClause(disallow, os_name='linux')], False),
    ([RuleClause(disallow, os_name='windows')], True),
    ([RuleClause(allow, os_arch='x64')], True),
    ([RuleClause(disallow, os_arch='x86')], True),
])
def test_single_clause(rules, expected):
    assert is_included(rules, LINUX) is expected


def test_bare_allow_clause_excludes():
    assert not is_included([RuleClause(allow)], LINUX)


@pytest.mark.parametrize("rules", [
    [RuleClause(disallow, os_name='linux'), RuleClause(allow, os_name='linux')],
    [RuleClause(allow, os_name='linux'), RuleClause(disallow, os_name='linux')],
    [RuleClause(disallow, os_name='osx'), RuleClause(allow, os_name='windows'), RuleClause(allow, os_name='linux')],
])
def test_first_violating_clause_excludes_regardless_of_position(rules):
    assert not is_included(rules, LINUX)


def test_all_clauses_satisfied_is_included():
    rules = [RuleClause(allow, os_name='linux'), RuleClause(disallow, os_name='osx'), RuleClause(disallow, os_arch='arm64')]
    assert is_included(rules, LINUX)


def test_name_or_arch_is_enough_to_match():
    assert clause_matches(RuleClause(allow, os_name='osx', os_arch='x64'), LINUX)
    assert clause_matches(RuleClause(allow, os_name='linux', os_arch='arm64'), LINUX)
    assert not clause_matches(RuleClause(allow, os_name='osx', os_arch='arm64'), LINUX)
