"""Unit tests for publicdashboard.dashboards.pagination."""

from publicdashboard.dashboards.pagination import paginate, parse_int


class TestPaginate:

    def test_first_page(self):
        page = paginate(list(range(1, 26)), page_index=1, items_per_page=10)
        assert page.ids == list(range(1, 11))
        assert page.page_count == 3
        assert page.has_next and not page.has_previous
        assert (page.first_item, page.last_item) == (1, 10)

    def test_last_partial_page(self):
        page = paginate(list(range(1, 26)), page_index=3, items_per_page=10)
        assert page.ids == [21, 22, 23, 24, 25]
        assert not page.has_next
        assert (page.first_item, page.last_item) == (21, 25)

    def test_index_clamped(self):
        assert paginate([1, 2, 3], page_index=9, items_per_page=2).page_index == 2
        assert paginate([1, 2, 3], page_index=-1, items_per_page=2).page_index == 1

    def test_string_parameters(self):
        page = paginate([1, 2, 3, 4], page_index="2", items_per_page="3")
        assert page.ids == [4]

    def test_bad_page_size_falls_back(self):
        assert paginate([1], items_per_page=0).items_per_page == 10
        assert paginate([1], items_per_page="abc").items_per_page == 10

    def test_empty(self):
        page = paginate([])
        assert page.ids == []
        assert page.page_count == 1
        assert (page.first_item, page.last_item) == (0, 0)

    def test_to_dict(self):
        d = paginate([1, 2, 3], page_index=2, items_per_page=2, options=[2, 4]).to_dict()
        assert d["page_index"] == 2
        assert d["total"] == 3
        assert d["has_previous"] is True


class TestParseInt:

    def test_values(self):
        assert parse_int("5", 1) == 5
        assert parse_int(None, 1) == 1
        assert parse_int("", 3) == 3
        assert parse_int("x", 7) == 7
