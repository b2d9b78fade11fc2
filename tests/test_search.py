# Search service: candidate loading, store-fault propagation, nearby hydration and filtered search.
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app import models, schemas, search
from app.db import Base, engine
from app.geo import InvalidGeoQuery, RankedResult, bounding_box


# Seed: Douala listings around Bonanjo plus one far away and a few non-searchable rows
def seed_douala(make_property) -> dict:
    return {
        "A": make_property("Akwa flat", 4.0469, 9.7069, price=150000, bedrooms=2),
        "B": make_property("Bonapriso studio", 4.0614, 9.7244, type="studio", price=90000, bedrooms=1),
        "C": make_property("Far villa", 10.0, 10.0, type="villa", price=500000, bedrooms=5),
        "inactive": make_property("Inactive", 4.0512, 9.7680, status="inactive"),
        "rented": make_property("Unavailable", 4.0512, 9.7680, is_available=False),
        "no_coords": make_property("No coordinates"),
        "half_coords": make_property("Latitude only", 4.0512, None),
    }


def test_fetch_candidates_only_searchable_geotagged(db, make_property):
    ids = seed_douala(make_property)
    candidates = search.fetch_candidates(db)
    assert [c.id for c in candidates] == sorted([ids["A"], ids["B"], ids["C"]])
    assert all(c.latitude is not None and c.longitude is not None for c in candidates)


def test_fetch_candidates_with_bounding_box(db, make_property):
    ids = seed_douala(make_property)
    candidates = search.fetch_candidates(db, bounding_box(4.0511, 9.7679, 10.0))
    assert {c.id for c in candidates} == {ids["A"], ids["B"]}


@pytest.mark.parametrize("prefilter", ["true", "false"])
def test_properties_within_radius_same_with_or_without_prefilter(db, make_property, monkeypatch, prefilter):
    monkeypatch.setenv("GEO_BBOX_PREFILTER", prefilter)
    ids = seed_douala(make_property)
    results = search.properties_within_radius(db, 4.0511, 9.7679, 10.0)
    assert [r.id for r in results] == [ids["B"], ids["A"]]
    assert results[0].distance <= results[1].distance <= 10.0


def test_properties_within_radius_rejects_nan(db):
    with pytest.raises(InvalidGeoQuery):
        search.properties_within_radius(db, float("nan"), 9.7679, 10.0)


def test_store_fault_is_not_an_empty_result(db, make_property):
    seed_douala(make_property)
    db.close()
    # Table vanishes underneath the search: must surface as an error, not []
    Base.metadata.drop_all(bind=engine)
    with pytest.raises(search.GeoSearchError) as info:
        search.properties_within_radius(db, 4.0511, 9.7679, 10.0)
    assert info.value.__cause__ is not None


def test_nearby_properties_returns_rows_with_distance(db, make_property):
    ids = seed_douala(make_property)
    pairs = search.nearby_properties(db, 4.0511, 9.7679, 10.0, limit=20)
    assert [p.id for p, _ in pairs] == [ids["B"], ids["A"]]
    assert all(isinstance(p, models.Property) for p, _ in pairs)
    assert pairs[0][1] <= pairs[1][1]


def test_nearby_properties_limit(db, make_property):
    ids = seed_douala(make_property)
    pairs = search.nearby_properties(db, 4.0511, 9.7679, 10.0, limit=1)
    assert [p.id for p, _ in pairs] == [ids["B"]]


def test_nearby_properties_rechecks_rows_after_scan(db, make_property, monkeypatch):
    ids = seed_douala(make_property)
    # Pretend the scan saw the inactive listing (e.g. it was deactivated in between)
    stale = [RankedResult(ids["inactive"], 0.01), RankedResult(ids["B"], 4.9), RankedResult(ids["A"], 6.8)]
    monkeypatch.setattr(search, "properties_within_radius", lambda *a, **k: stale)
    pairs = search.nearby_properties(db, 4.0511, 9.7679, 10.0, limit=20)
    assert [p.id for p, _ in pairs] == [ids["B"], ids["A"]]


def test_nearby_properties_empty(db, make_property):
    seed_douala(make_property)
    assert search.nearby_properties(db, -33.86, 151.2, 5.0, limit=20) == []


def test_search_geo_miss_short_circuits(db, make_property, monkeypatch):
    seed_douala(make_property)

    def _boom(q, filters):
        raise AssertionError("relational filters should not run after an empty geo scan")

    monkeypatch.setattr(search, "_apply_filters", _boom)
    filters = schemas.PropertyFilters(latitude=-33.86, longitude=151.2, radius=5.0)
    assert search.search_properties(db, filters) == ([], 0)


def test_search_geo_intersects_other_filters(db, make_property):
    ids = seed_douala(make_property)
    filters = schemas.PropertyFilters(latitude=4.0511, longitude=9.7679, radius=10.0, type="studio")
    items, total = search.search_properties(db, filters)
    assert total == 1
    assert [p.id for p in items] == [ids["B"]]


def test_search_partial_geo_is_ignored(db, make_property):
    seed_douala(make_property)
    # radius missing: no geo constraint, every available listing qualifies
    filters = schemas.PropertyFilters(latitude=4.0511, longitude=9.7679)
    _, total = search.search_properties(db, filters)
    assert total == 6  # everything except the unavailable one


def test_search_relational_filters(db, make_property):
    ids = seed_douala(make_property)
    items, total = search.search_properties(db, schemas.PropertyFilters(min_price=100000, max_price=200000))
    assert {p.id for p in items} >= {ids["A"]}
    assert ids["B"] not in {p.id for p in items}

    items, _ = search.search_properties(db, schemas.PropertyFilters(bedrooms=3))
    assert [p.id for p in items] == [ids["C"]]

    items, _ = search.search_properties(db, schemas.PropertyFilters(search="  BONAPRISO "))
    assert [p.id for p in items] == [ids["B"]]


def test_search_amenity_filter(db, make_property):
    furnished = make_property("Furnished", furnished=True, parking=True)
    make_property("Bare")
    items, total = search.search_properties(db, schemas.PropertyFilters(furnished=True))
    assert total == 1 and items[0].id == furnished
    _, total = search.search_properties(db, schemas.PropertyFilters(parking=False))
    assert total == 1


def test_search_ordering_and_pagination(db, make_property):
    cheap = make_property("Cheap", price=50000)
    mid = make_property("Mid", price=100000)
    premium = make_property("Premium", price=300000, is_premium=True)
    pricey = make_property("Pricey", price=400000)

    filters = schemas.PropertyFilters(sort_by="price", sort_order="asc")
    items, total = search.search_properties(db, filters, page=1, limit=3)
    assert total == 4
    # Premium listings always lead
    assert [p.id for p in items] == [premium, cheap, mid]

    items, _ = search.search_properties(db, filters, page=2, limit=3)
    assert [p.id for p in items] == [pricey]


def test_total_pages():
    assert search.total_pages(0, 10) == 0
    assert search.total_pages(10, 10) == 1
    assert search.total_pages(11, 10) == 2


def test_search_text_treats_wildcards_literally(db, make_property):
    plain = make_property("Plain flat")
    underscored = make_property("Studio_2")
    percent = make_property("100% furnished loft")

    items, _ = search.search_properties(db, schemas.PropertyFilters(search="_"))
    assert [p.id for p in items] == [underscored]

    items, _ = search.search_properties(db, schemas.PropertyFilters(search="%"))
    assert [p.id for p in items] == [percent]

    items, _ = search.search_properties(db, schemas.PropertyFilters(search="flat"))
    assert [p.id for p in items] == [plain]


def test_search_created_at_is_always_newest_first(db, make_property):
    old = make_property("Old", views=5, created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    new = make_property("New", views=1, created_at=datetime(2025, 6, 1, tzinfo=timezone.utc))

    for order in ("asc", "desc"):
        items, _ = search.search_properties(db, schemas.PropertyFilters(sort_by="created_at", sort_order=order))
        assert [p.id for p in items] == [new, old]

    # Explicit fields still honor sort_order
    items, _ = search.search_properties(db, schemas.PropertyFilters(sort_by="views", sort_order="asc"))
    assert [p.id for p in items] == [new, old]
    items, _ = search.search_properties(db, schemas.PropertyFilters(sort_by="views", sort_order="desc"))
    assert [p.id for p in items] == [old, new]
