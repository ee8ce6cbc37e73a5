"""Activity panel texts and icons."""

from __future__ import annotations

import pytest

from ecoideias.activity.service import activity_icon, describe_activity


@pytest.mark.parametrize(("action", "expected"), [
    ("idea_created", 'Maria criou a ideia "Cisternas"'),
    ("idea_approved", 'Maria teve a ideia "Cisternas" aprovada \U0001f389'),
    ("idea_rejected", 'A ideia "Cisternas" de Maria foi reprovada'),
    ("idea_status_changed", 'Maria teve o status da ideia "Cisternas" alterado'),
    ("idea_implemented", 'A ideia "Cisternas" de Maria foi implementada'),
    ("something_else", "Maria realizou uma ação"),
])
def test_describe_activity(action: str, expected: str) -> None:
    assert describe_activity(action, "Maria", "Cisternas") == expected


def test_fallback_name_and_title() -> None:
    assert describe_activity("idea_created", None, None) == 'Usuário criou a ideia "uma ideia"'
    assert describe_activity("idea_rejected", "", "") == 'A ideia "uma ideia" de Usuário foi reprovada'


@pytest.mark.parametrize(("action", "icon"), [
    ("idea_created", "lightbulb"),
    ("idea_approved", "check-circle"),
    ("idea_rejected", "x-circle"),
    ("idea_status_changed", "clock"),
    ("idea_implemented", "clock"),
    ("unknown", "clock"),
])
def test_activity_icon(action: str, icon: str) -> None:
    assert activity_icon(action) == icon
