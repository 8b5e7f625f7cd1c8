import threading

import pytest

from weight_tracker.errors import ValidationError
from weight_tracker.models import water
from weight_tracker.models.water import (
    add_water,
    get_today_water,
    get_water_entries,
    get_water_entry,
    reset_today_water,
    set_water_amount,
)


@pytest.fixture
def fixed_today(monkeypatch):
    monkeypatch.setattr(water, 'today_date', lambda: '2024-06-15')
    return '2024-06-15'


def test_no_water_logged(app, config_dir):
    assert get_water_entries('alice') == []
    assert get_today_water('alice') is None
    assert not (config_dir / 'water' / 'alice.json').exists()


def test_add_water_accumulates_for_today(app, fixed_today):
    add_water('alice', 200)
    entry = add_water('alice', 300)

    assert entry.amount == 500
    assert entry.date == fixed_today
    assert entry.author == 'alice'
    assert entry.id.startswith('water-')
    assert len(get_water_entries('alice')) == 1
    assert get_today_water('alice').amount == 500


@pytest.mark.parametrize('amount', [0, -100, '200', None, True, float('nan'), float('inf')])
def test_add_water_rejects_bad_amounts(app, amount):
    with pytest.raises(ValidationError):
        add_water('alice', amount)


def test_reset_today_creates_or_zeroes(app, fixed_today):
    entry = reset_today_water('alice')
    assert entry.amount == 0
    assert entry.date == fixed_today

    add_water('alice', 750)
    assert reset_today_water('alice').amount == 0
    assert len(get_water_entries('alice')) == 1


def test_set_water_amount_for_any_date(app, fixed_today):
    add_water('alice', 400)
    set_water_amount('alice', '2023-12-31', 1000)

    set_water_amount('alice', '2024-01-01', 500)
    entry = set_water_amount('alice', '2024-01-01', 750)

    assert entry.amount == 750
    assert get_water_entry('alice', '2024-01-01').amount == 750
    assert get_water_entry('alice', '2023-12-31').amount == 1000
    assert get_today_water('alice').amount == 400
    assert len(get_water_entries('alice')) == 3


def test_set_water_amount_allows_zero(app):
    assert set_water_amount('alice', '2024-01-01', 0).amount == 0


@pytest.mark.parametrize('date, amount', [
    ('2024-01-01', -1),
    ('2024-01-01', 'lots'),
    ('2024-01-01', float('nan')),
    ('2024-01-01', float('inf')),
    ('01/01/2024', 100),
    ('2024-1-1', 100),
    ('2024-02-30', 100),
])
def test_set_water_amount_validation(app, date, amount):
    with pytest.raises(ValidationError):
        set_water_amount('alice', date, amount)


def test_concurrent_adds_are_not_lost(app, fixed_today):
    def drink():
        with app.app_context():
            for _ in range(10):
                add_water('alice', 100)

    threads = [threading.Thread(target=drink) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert get_today_water('alice').amount == 4000
