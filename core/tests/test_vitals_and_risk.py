import datetime

import pytest

from core.services.risk import normalize_risk_label
from core.services.vitals import age_on, format_bp, number_or_none, parse_bp

LABELS = {'LOW', 'MEDIUM', 'HIGH', 'UNKNOWN'}


@pytest.mark.parametrize('raw,expected', [
    ('Low', 'LOW'),
    ('medium', 'MEDIUM'),
    ('HIGH', 'HIGH'),
    ('Unknown', 'UNKNOWN'),
    (' low ', 'UNKNOWN'),
    ('Lowish', 'UNKNOWN'),
    ('', 'UNKNOWN'),
    (None, 'UNKNOWN'),
    (3, 'UNKNOWN'),
])
def test_normalize_risk_label(raw, expected):
    assert normalize_risk_label(raw) == expected


@pytest.mark.parametrize('raw', ['Low', 'mEdIuM', 'high', 'n/a', '', 'UNKNOWN', 'ß'])
def test_normalize_is_idempotent_and_closed(raw):
    once = normalize_risk_label(raw)
    assert once in LABELS
    assert normalize_risk_label(once) == once


def test_format_bp():
    assert format_bp(120, 80) == '120/80'
    assert format_bp(120, None) is None
    assert format_bp(None, None) is None


@pytest.mark.parametrize('text,expected', [
    ('120/80', (120, 80)),
    (' 135 / 90 ', (135, 90)),
    ('120-80', None),
    ('1200/80', None),
    ('', None),
    (None, None),
])
def test_parse_bp(text, expected):
    assert parse_bp(text) == expected


def test_age_on_counts_completed_years():
    dob = datetime.date(1992, 6, 15)
    assert age_on(dob, datetime.date(2026, 6, 14)) == 33
    assert age_on(dob, datetime.date(2026, 6, 15)) == 34
    assert age_on(None) is None


@pytest.mark.parametrize('value,expected', [
    ('42', 42),
    ('42.5', 42.5),
    (7, 7),
    ('', None),
    ('abc', None),
    (True, None),
    ('nan', None),
    ('inf', None),
    ('-Infinity', None),
    ('1e400', None),
    (float('inf'), None),
    (float('nan'), None),
    (None, None),
])
def test_number_or_none(value, expected):
    assert number_or_none(value) == expected
