import pytest

from shared.core.ids import ALPHABET, generate_id


def test_prefix_and_alphabet():
    value = generate_id('D')
    assert value[0] == 'D'
    assert all(ch in ALPHABET for ch in value[1:])


def test_ids_do_not_repeat():
    ids = {generate_id('D') for _ in range(1000)}
    assert len(ids) == 1000


def test_other_entity_prefixes():
    assert generate_id('C').startswith('C')
    assert generate_id('P').startswith('P')


def test_prefix_required():
    with pytest.raises(ValueError):
        generate_id('')
