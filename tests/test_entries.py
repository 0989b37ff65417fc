import dataclasses
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from drapes.entries import WindowEntry, WindowEntryRepository


def test_add_assigns_fresh_ids_and_computes():
    repo = WindowEntryRepository()
    a = repo.add(stitch_type='Pleated', width=54, height=84, window_name='Living')
    b = repo.add(stitch_type='Pleated', width=54, height=84)
    assert a.window_id and b.window_id and a.window_id != b.window_id
    assert a.panels == 3 and a.quantity == 7.54 and a.track == 4.5
    assert b.window_name == 'Window'
    assert b.lining_type == 'No Lining'
    assert len(repo) == 2


def test_add_ignores_supplied_id():
    repo = WindowEntryRepository()
    entry = repo.add(window_id='fixed', stitch_type='Eyelet', width=48, height=60)
    assert entry.window_id != 'fixed'


def test_update_replaces_whole_entry_and_keeps_id():
    repo = WindowEntryRepository()
    original = repo.add(stitch_type='Pleated', width=54, height=84, notes='bay window')
    updated = repo.update(0, stitch_type='Roman Blinds 48"', width=48, height=60)
    assert updated.window_id == original.window_id
    assert updated.panels == 1
    assert updated.sqft == 20.0
    assert updated.track == 0
    assert updated.notes == ''
    assert repo.get(0) is updated


def test_update_bad_position():
    repo = WindowEntryRepository()
    with pytest.raises(IndexError):
        repo.update(0, stitch_type='Pleated', width=10, height=10)


def test_entries_are_immutable():
    entry = WindowEntry.create(stitch_type='Pleated', width=54, height=84)
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.width = 100


def test_totals():
    repo = WindowEntryRepository()
    repo.add(stitch_type='Pleated', width=54, height=84)
    repo.add(stitch_type='Roman Blinds 48"', width=48, height=60)
    assert repo.total_quantity() == round(7.54 + 1.9, 2)
    assert repo.total_sqft() == 20.0


def test_remove():
    repo = WindowEntryRepository()
    first = repo.add(stitch_type='Pleated', width=54, height=84)
    repo.add(stitch_type='Eyelet', width=48, height=60)
    repo.remove(1)
    assert [e.window_id for e in repo] == [first.window_id]


def test_recompute_fixes_stale_numbers_and_is_idempotent():
    stale = WindowEntry(
        window_id='w1', window_name='Hall', stitch_type='Pleated', lining_type='No Lining',
        width=54, height=84, panels=9, quantity=99.0, track=0.0, sqft=5.0,
    )
    repo = WindowEntryRepository.from_entries([stale])
    repo.recompute()
    once = repo.get(0)
    repo.recompute()
    assert repo.get(0) == once
    assert (once.panels, once.quantity, once.sqft, once.track) == (3, 7.54, 0.0, 4.5)
    assert once.window_id == 'w1'
