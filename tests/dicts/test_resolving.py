import pytest

from kubewait._cogs.structs.bodies import parse_field, resolve


@pytest.mark.parametrize('field, expected', [
    (None, ()),
    ('', ()),
    ('status', ('status',)),
    ('status.phase', ('status', 'phase')),
    ('.status.phase', ('status', 'phase')),
    (['status', 'phase'], ('status', 'phase')),
    (('status', 'phase'), ('status', 'phase')),
])
def test_field_parsing(field, expected):
    assert parse_field(field) == expected


def test_field_parsing_of_unsupported_types():
    with pytest.raises(ValueError):
        parse_field(123)  # type: ignore


def test_existing_key():
    d = {'abc': {'def': {'hij': 'val'}}}
    r = resolve(d, ['abc', 'def', 'hij'])
    assert r == 'val'


def test_existing_key_with_no_default():
    d = {'abc': {'def': {'hij': 'val'}}}
    r = resolve(d, 'abc.def.hij')
    assert r == 'val'


def test_unexisting_key_with_default_none():
    d = {'abc': {'def': {'hij': 'val'}}}
    r = resolve(d, ['abc', 'def', 'xyz'], None)
    assert r is None


def test_unexisting_key_with_default_value():
    d = {'abc': {'def': {'hij': 'val'}}}
    default = object()
    r = resolve(d, ['abc', 'xyz', 'hij'], default)
    assert r is default


def test_unexisting_key_without_default():
    d = {'abc': {'def': {'hij': 'val'}}}
    with pytest.raises(KeyError):
        resolve(d, ['abc', 'xyz', 'hij'])


def test_nonmapping_with_no_default():
    d = {'key': 'val'}
    with pytest.raises(TypeError):
        resolve(d, ['key', 'sub'])


def test_nonmapping_with_default():
    d = {'key': 'val'}
    default = object()
    r = resolve(d, ['key', 'sub'], default)
    assert r is default


def test_none_is_treated_as_a_regular_default_value():
    d = {'abc': {'def': {'hij': 'val'}}}
    r = resolve(d, ['abc', 'def', 'xyz'], None)
    assert r is None


def test_empty_path():
    d = {'key': 'val'}
    r = resolve(d, [])
    assert r == d
    assert r is d


@pytest.mark.parametrize('field, expected', [
    ('status.loadBalancer.ingress.0.ip', '10.0.0.1'),
    ('status.loadBalancer.ingress.1.hostname', 'lb.example.com'),
    ('status.loadBalancer.ingress.-1.hostname', 'lb.example.com'),
])
def test_list_items_by_indices(field, expected):
    d = {'status': {'loadBalancer': {'ingress': [{'ip': '10.0.0.1'}, {'hostname': 'lb.example.com'}]}}}
    r = resolve(d, field)
    assert r == expected


@pytest.mark.parametrize('field', [
    'status.loadBalancer.ingress.5.ip',
    'status.loadBalancer.ingress.first.ip',
])
def test_list_items_absent_with_default(field):
    d = {'status': {'loadBalancer': {'ingress': [{'ip': '10.0.0.1'}]}}}
    r = resolve(d, field, None)
    assert r is None


def test_list_items_out_of_range_without_default():
    d = {'items': [1, 2]}
    with pytest.raises(IndexError):
        resolve(d, 'items.5')
