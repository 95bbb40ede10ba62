from warrantylink.models import Product
from warrantylink.stages.detector import LinkRule
from warrantylink.stages.linkage import Link, adjacency_from_links, build_adjacency, detect_links


def _p(pid, name, **kw):
    return Product(id=pid, product_name=name, **kw)


def test_detect_links_each_pair_once():
    products = [
        _p("a", "iPhone 15 Pro", brand="Apple"),
        _p("b", "iPhone 15 Pro", brand="Apple"),
        _p("c", "Toaster", brand="Breville"),
    ]
    links = detect_links(products)
    assert links == [Link("a", "b", LinkRule.EXACT)]


def test_adjacency_is_symmetric_and_covers_every_id():
    products = [
        _p("a", "MacBook Pro", brand="Apple", purchase_date="2024-01-01"),
        _p("b", "MacBook Pro Extended Care", brand="Apple", purchase_date="2024-01-20"),
        _p("c", "Bicycle", brand="Trek"),
    ]
    adj = build_adjacency(products)
    assert set(adj) == {"a", "b", "c"}
    assert adj["a"] == {"b"}
    assert adj["b"] == {"a"}
    assert adj["c"] == set()
    for src, targets in adj.items():
        for dst in targets:
            assert src in adj[dst]


def test_adjacency_from_one_sided_links():
    products = [_p("x", "One"), _p("y", "Two")]
    adj = adjacency_from_links(products, [Link("y", "x", LinkRule.SERIAL)])
    assert adj == {"x": {"y"}, "y": {"x"}}


def test_empty_input():
    assert detect_links([]) == []
    assert build_adjacency([]) == {}
