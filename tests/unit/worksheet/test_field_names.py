"""Tests for raw field name to label normalization."""

import pytest

from insight_framework.worksheet.field_names import (
    normalize_field_name,
    strip_aggregation,
    title_case,
)


class TestNormalizeFieldName:
    """Ordered rule table, first match wins."""

    @pytest.mark.parametrize("raw,expected", [
        ("SUM(Sales)", "Sales"),
        ("AGG(SUM(Revenue))", "Revenue"),
        ("AVG(profit)", "Profit"),
        ("bounce", "Bounce Rate"),
        ("open rate", "Open Rate"),
        ("SUM(Orders)", "Orders"),
        ("order_total-value", "Order Total Value"),
        ("Shipping  Cost", "Shipping Cost"),
    ])
    def test_labels(self, raw, expected):
        assert normalize_field_name(raw) == expected

    @pytest.mark.parametrize("raw", ["CNTD(Id)", "COUNT(*)", "COUNT(Record)", "cntd(ID)"])
    def test_record_count(self, raw):
        assert normalize_field_name(raw) == "Record Count"

    def test_record_count_with_entity_hint(self):
        assert normalize_field_name("CNTD(Id)", entity_hint="Orders") == "Total Orders"

    def test_count_of_a_field_is_not_a_record_count(self):
        assert normalize_field_name("COUNT(Customer)") == "Customers"

    def test_date_part(self):
        assert normalize_field_name("DAY(Order Date)") == "Day of Order Date"
        assert normalize_field_name("month(SUM(Sales))") == "Month of Sales"

    def test_unbalanced_date_part(self):
        assert normalize_field_name("Day(recorded At") == "Day of Recorded At"

    def test_rate_suffix(self):
        assert normalize_field_name("click_through", is_rate=True) == "Click Through Rate"
        assert normalize_field_name("conversion_rate", is_rate=True) == "Conversion Rate"
        assert normalize_field_name("click_through") == "Click Through"

    def test_empty_name(self):
        assert normalize_field_name("") == ""


class TestLabelOverrides:
    """Exact overrides, tolerant of one trailing parenthesis."""

    def test_exact_override(self):
        overrides = {"SUM(Sales)": "Gross Sales"}
        assert normalize_field_name("SUM(Sales)", overrides) == "Gross Sales"

    def test_override_matches_with_closing_paren_added(self):
        overrides = {"SUM(Sales)": "Gross Sales"}
        assert normalize_field_name("SUM(Sales", overrides) == "Gross Sales"

    def test_override_matches_with_closing_paren_removed(self):
        overrides = {"SUM(Profit": "Net Profit"}
        assert normalize_field_name("SUM(Profit)", overrides) == "Net Profit"

    def test_override_wins_over_every_rule(self):
        overrides = {"CNTD(Id)": "Unique Visitors"}
        assert normalize_field_name("CNTD(Id)", overrides, entity_hint="Orders") == "Unique Visitors"

    def test_override_applies_inside_date_part(self):
        overrides = {"Order Date": "Placed"}
        assert normalize_field_name("WEEK(Order Date)", overrides) == "Week of Placed"


class TestHelpers:
    """Aggregation stripping and title casing."""

    @pytest.mark.parametrize("raw,expected", [
        ("SUM(Sales)", "Sales"),
        ("AGG(SUM(Sales))", "Sales"),
        ("Sales", "Sales"),
        ("MEDIAN( Price )", "Price"),
    ])
    def test_strip_aggregation(self, raw, expected):
        assert strip_aggregation(raw) == expected

    def test_title_case(self):
        assert title_case("ORDER_total-value") == "Order Total Value"
