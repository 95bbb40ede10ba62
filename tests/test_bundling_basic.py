from warrantylink.models import Product
from warrantylink.stages.bundling import resolve_components


def _p(pid, name="Item", **kw):
    return Product(id=pid, product_name=name, **kw)


def _ids(components):
    return [[p.id for p in c] for c in components]


def test_singletons_without_edges():
    products = [_p("a"), _p("b"), _p("c")]
    comps = resolve_components(products, {})
    assert _ids(comps) == [["a"], ["b"], ["c"]]


def test_transitive_closure():
    # a-b and b-c linked, a-c not directly
    products = [_p("a"), _p("x"), _p("b"), _p("c")]
    adj = {"a": {"b"}, "b": {"a", "c"}, "c": {"b"}, "x": set()}
    comps = resolve_components(products, adj)
    assert _ids(comps) == [["a", "b", "c"], ["x"]]


def test_main_is_first_by_input_position():
    products = [_p("d"), _p("c"), _p("b"), _p("a")]
    # only one direction recorded, pointing from a later product
    adj = {"a": ["c"], "b": ["d"], "c": ["b"]}
    comps = resolve_components(products, adj)
    assert _ids(comps) == [["d", "c", "b", "a"]]


def test_components_ordered_by_main_position():
    products = [_p("a"), _p("b"), _p("c"), _p("d"), _p("e")]
    adj = {"d": {"b"}, "e": {"c"}}
    comps = resolve_components(products, adj)
    assert _ids(comps) == [["a"], ["b", "d"], ["c", "e"]]


def test_unknown_ids_in_adjacency_are_ignored():
    products = [_p("a"), _p("b")]
    comps = resolve_components(products, {"a": {"zzz"}, "ghost": {"b"}})
    assert _ids(comps) == [["a"], ["b"]]


def test_partition():
    products = [_p(str(i)) for i in range(10)]
    adj = {"0": {"5"}, "5": {"9"}, "2": {"3"}, "7": {"7"}}
    comps = resolve_components(products, adj)
    seen = [p.id for c in comps for p in c]
    assert sorted(seen) == sorted(p.id for p in products)
    assert len(seen) == len(set(seen))
