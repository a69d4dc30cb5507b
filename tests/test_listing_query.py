"""Unit tests for the listing search / filter / sort / pagination builder."""
from datetime import datetime

import pytest

from models.club import Club
from services.listing_query import (
    DEFAULT_LIMIT,
    ListingFilter,
    ListingQuery,
    ListingSort,
    ListingValidationError,
    build_filter,
    build_sort,
    paginate,
    search_listings,
)
from tests.memory_store import MemoryListingStore


def _club(i, **kw):
    defaults = dict(
        id=i,
        club_name=f"Club {i}",
        university_name=f"University {i}",
        university_country="Nowhere",
        category="STEM",
        application_fees=float(i),
        posted_date=datetime(2024, 1, i % 28 + 1),
        posted_user_email="owner@club.test",
    )
    defaults.update(kw)
    return Club(**defaults)


@pytest.fixture
def listings():
    return [
        _club(1, club_name="Tech Club", category="Arts", application_fees=30.0),
        _club(2, club_name="Robotics", university_name="Georgia Tech", category="STEM", application_fees=10.0),
        _club(3, club_name="Chess", university_country="Technolandia", category="Games", application_fees=20.0),
        _club(4, club_name="Poetry", category="Arts", application_fees=None),
        _club(5, club_name="TECHNICAL writing", category="STEM", application_fees=50.0),
    ]


class TestBuildFilter:
    def test_search_is_case_insensitive_substring_over_three_fields(self, listings):
        f = build_filter(ListingQuery(search="tech"))
        assert [c.id for c in listings if f.matches(c)] == [1, 2, 3, 5]

    def test_search_does_not_look_at_other_fields(self):
        club = _club(9, club_name="Chess", university_name="Oxford", university_country="UK",
                     category="tech", degree="tech")
        assert not ListingFilter(search="tech").matches(club)

    def test_category_is_exact_match(self, listings):
        f = build_filter(ListingQuery(category="STEM"))
        assert [c.id for c in listings if f.matches(c)] == [2, 5]
        assert not ListingFilter(category="stem").matches(listings[1])

    def test_search_and_category_are_combined_with_and(self, listings):
        f = build_filter(ListingQuery(search="tech", category="STEM"))
        matched = [c for c in listings if f.matches(c)]
        assert [c.id for c in matched] == [2, 5]
        # "Tech Club" 属于 Arts，被排除
        assert listings[0] not in matched

    def test_absent_parameters_match_everything(self, listings):
        f = build_filter(ListingQuery())
        assert all(f.matches(c) for c in listings)
        assert f.clauses(Club) == []

    def test_missing_field_values_do_not_crash(self):
        club = Club(id=1, posted_user_email="x@y.z")
        assert not ListingFilter(search="a").matches(club)

    def test_search_folds_non_ascii_case(self):
        club = _club(1, club_name="ÉCOLE Club")
        assert ListingFilter(search="école").matches(club)
        assert ListingFilter(search="ÉCOLE").matches(_club(2, club_name="école d'été"))

    def test_like_metacharacters_are_literal(self):
        plain = _club(1, club_name="100 members")
        percent = _club(2, club_name="100% club")
        f = ListingFilter(search="0%")
        assert not f.matches(plain)
        assert f.matches(percent)


class TestBuildSort:
    def test_fees_ascending(self):
        s = build_sort(ListingQuery(sort_by="fees", order="asc"))
        assert s == ListingSort(field="application_fees", descending=False)

    @pytest.mark.parametrize("order", [None, "desc", "ASC", "garbage"])
    def test_anything_but_asc_is_descending(self, order):
        s = build_sort(ListingQuery(sort_by="fees", order=order))
        assert s.descending is True

    def test_date_sorts_by_posted_date(self):
        assert build_sort(ListingQuery(sort_by="date", order="asc")).field == "posted_date"

    @pytest.mark.parametrize("sort_by", [None, "", "unknown", "name", "Fees"])
    def test_unrecognized_sort_key_is_a_no_op(self, sort_by):
        assert build_sort(ListingQuery(sort_by=sort_by, order="asc")) is None

    def test_sorted_fees_are_monotonic(self, listings):
        store = MemoryListingStore(listings)
        asc = search_listings(store, ListingQuery(sort_by="fees", order="asc", limit=10)).data
        fees = [c.application_fees for c in asc if c.application_fees is not None]
        assert fees == sorted(fees)

        desc = search_listings(store, ListingQuery(sort_by="fees", limit=10)).data
        fees = [c.application_fees for c in desc if c.application_fees is not None]
        assert fees == sorted(fees, reverse=True)

    def test_unknown_sort_leaves_store_order(self, listings):
        store = MemoryListingStore(listings)
        unsorted = search_listings(store, ListingQuery(limit=10)).data
        unknown = search_listings(store, ListingQuery(sort_by="unknown", limit=10)).data
        assert [c.id for c in unknown] == [c.id for c in unsorted] == [1, 2, 3, 4, 5]


class TestPaginate:
    def test_second_page_of_ten(self):
        store = MemoryListingStore([_club(i) for i in range(1, 11)])
        page = paginate(store, ListingFilter(), None, 2, 3)
        assert [c.id for c in page.data] == [4, 5, 6]
        assert page.total == 10
        assert page.total_pages == 4
        assert page.page == 2

    def test_last_partial_page(self):
        store = MemoryListingStore([_club(i) for i in range(1, 11)])
        page = paginate(store, ListingFilter(), None, 4, 3)
        assert [c.id for c in page.data] == [10]

    def test_page_beyond_end_is_empty(self):
        store = MemoryListingStore([_club(i) for i in range(1, 4)])
        page = paginate(store, ListingFilter(), None, 5, 3)
        assert page.data == []
        assert page.total == 3
        assert page.total_pages == 1

    def test_empty_set(self):
        page = paginate(MemoryListingStore([]), ListingFilter(), None, 1, 9)
        assert page.to_dict() == {"data": [], "total": 0, "page": 1, "totalPages": 0}

    def test_skip_arithmetic_is_passed_to_store(self):
        store = MemoryListingStore([_club(i) for i in range(1, 30)])
        paginate(store, ListingFilter(), None, 3, 5)
        assert store.calls[-1][3:] == (10, 5)

    def test_same_query_twice_gives_same_page(self, listings):
        store = MemoryListingStore(listings)
        q = ListingQuery(search="tech", sort_by="fees", order="asc", page=1, limit=2)
        first = search_listings(store, q)
        second = search_listings(store, q)
        assert first.to_dict(lambda c: c.id) == second.to_dict(lambda c: c.id)

    def test_skip_beyond_store_range_never_reaches_store(self):
        store = MemoryListingStore([_club(i) for i in range(1, 4)])
        page = paginate(store, ListingFilter(), None, 10 ** 20, 9)
        assert page.data == []
        assert (page.total, page.total_pages) == (3, 1)
        assert [c[0] for c in store.calls] == ["count"]

    def test_huge_limit_is_capped_for_the_store(self):
        store = MemoryListingStore([_club(i) for i in range(1, 4)])
        page = paginate(store, ListingFilter(), None, 1, 10 ** 30)
        assert len(page.data) == 3
        assert page.total_pages == 1
        assert store.calls[-1][4] == 2 ** 63 - 1


class TestListingQueryParsing:
    def test_defaults(self):
        q = ListingQuery.from_args({})
        assert (q.page, q.limit) == (1, DEFAULT_LIMIT)
        assert q.search is None and q.category is None

    def test_empty_strings_count_as_absent(self):
        q = ListingQuery.from_args({"search": "", "category": "", "page": "", "limit": ""})
        assert q == ListingQuery()

    def test_numeric_strings(self):
        q = ListingQuery.from_args({"page": "3", "limit": "12.0", "sortBy": "date", "order": "asc"})
        assert (q.page, q.limit, q.sort_by, q.order) == (3, 12, "date", "asc")

    @pytest.mark.parametrize("raw", ["0", "-2", "abc", "1.5", "nan"])
    def test_bad_page_is_clamped_to_first_page(self, raw):
        q = ListingQuery.from_args({"page": raw})
        assert q.effective_page == 1

    @pytest.mark.parametrize("raw", ["0", "-1", "abc", "2.5", "inf"])
    def test_bad_limit_yields_empty_page(self, raw, listings):
        q = ListingQuery.from_args({"limit": raw})
        assert q.effective_limit is None
        page = search_listings(MemoryListingStore(listings), q)
        assert page.data == []
        assert page.total == len(listings)
        assert page.total_pages == 0

    def test_strict_mode_rejects_bad_values(self):
        with pytest.raises(ListingValidationError):
            ListingQuery.from_args({"page": "0"}, strict=True)
        with pytest.raises(ListingValidationError):
            ListingQuery.from_args({"limit": "x"}, strict=True)
