"""
Test suite for the earnings repository.
Tests cover CRUD, filtering, permissive totals, the summary card and chart buckets.
"""

from datetime import date, timedelta

import pytest

from earnings import (
    EarningValidationError,
    EarningsRepository,
    format_amount,
    format_date,
    parse_amount,
)


class TestAddEarning:
    """Test creating earnings."""

    def test_add_prepends_with_id_and_timestamp(self, repository):
        first = repository.add_earning({"amount": 100, "category": "salary", "date": "2026-10-01"})
        second = repository.add_earning({"amount": "250.5", "category": "freelance", "date": "2026-10-02",
                                         "source": "Upwork", "notes": None})

        assert [e["id"] for e in repository.all()] == [second["id"], first["id"]]
        assert first["id"] != second["id"]
        assert second["amount"] == 250.5
        assert second["source"] == "Upwork"
        assert second["notes"] == ""
        assert second["createdAt"]

    @pytest.mark.parametrize("data,missing", [
        ({"category": "salary", "date": "2026-10-01"}, "amount"),
        ({"amount": 0, "category": "salary", "date": "2026-10-01"}, "amount"),
        ({"amount": "abc", "category": "salary", "date": "2026-10-01"}, "amount"),
        ({"amount": 10, "date": "2026-10-01"}, "category"),
        ({"amount": 10, "category": "lottery", "date": "2026-10-01"}, "category"),
        ({"amount": 10, "category": "salary"}, "date"),
        ({"amount": 10, "category": "salary", "date": "someday"}, "date"),
    ])
    def test_missing_required_field_is_rejected(self, repository, data, missing):
        """Amount, category and date are required; the write is blocked."""
        with pytest.raises(EarningValidationError) as excinfo:
            repository.add_earning(data)

        assert missing in excinfo.value.fields
        assert isinstance(excinfo.value, ValueError)
        assert repository.all() == []


class TestUpdateDeleteEarning:
    """Test editing and removing earnings."""

    def test_update_merges_fields(self, repository):
        earning = repository.add_earning({"amount": 100, "category": "salary", "date": "2026-10-01",
                                          "source": "Employer"})
        updated = repository.update_earning(earning["id"], {"amount": 150})

        assert updated["amount"] == 150
        assert updated["source"] == "Employer"
        assert updated["createdAt"] == earning["createdAt"]
        assert updated["updatedAt"]
        assert repository.get_earning(earning["id"]) == updated

    def test_update_cannot_change_id(self, repository):
        earning = repository.add_earning({"amount": 100, "category": "salary", "date": "2026-10-01"})
        updated = repository.update_earning(earning["id"], {"id": "other"})
        assert updated["id"] == earning["id"]

    def test_update_unknown_id_returns_none(self, repository):
        assert repository.update_earning("missing", {"amount": 5}) is None

    def test_update_rejects_invalid_fields(self, repository):
        earning = repository.add_earning({"amount": 100, "category": "salary", "date": "2026-10-01"})
        with pytest.raises(EarningValidationError):
            repository.update_earning(earning["id"], {"category": ""})
        assert repository.get_earning(earning["id"])["category"] == "salary"

    def test_delete_returns_removed_record(self, repository):
        keep = repository.add_earning({"amount": 1, "category": "salary", "date": "2026-10-01"})
        drop = repository.add_earning({"amount": 2, "category": "salary", "date": "2026-10-01"})

        assert repository.delete_earning(drop["id"]) == drop
        assert repository.all() == [keep]

    def test_delete_unknown_id_is_noop(self, repository):
        repository.add_earning({"amount": 1, "category": "salary", "date": "2026-10-01"})
        assert repository.delete_earning("missing") is None
        assert len(repository.all()) == 1


class TestFiltered:
    """Test category and relative date-range filters."""

    def test_category_filter_is_exact(self, repository, seed, today):
        seed((10, "salary", today), (20, "freelance", today), (30, "salary", today))
        assert [e["amount"] for e in repository.filtered(category="salary")] == [10, 30]
        assert len(repository.filtered(category="all")) == 3

    @pytest.mark.parametrize("date_range,included,excluded", [
        ("today", date(2026, 10, 19), date(2026, 10, 18)),
        ("week", date(2026, 10, 12), date(2026, 10, 11)),
        ("month", date(2026, 10, 1), date(2026, 9, 30)),
        ("year", date(2026, 1, 1), date(2025, 12, 31)),
    ])
    def test_date_ranges(self, repository, seed, date_range, included, excluded):
        seed((1, "salary", included), (2, "salary", excluded))
        assert [e["amount"] for e in repository.filtered(date_range=date_range)] == [1]

    def test_unknown_range_behaves_as_all(self, repository, seed, today):
        seed((1, "salary", today), (2, "salary", "2001-01-01"))
        assert len(repository.filtered(date_range="decade")) == 2
        assert len(repository.filtered(date_range="all")) == 2

    def test_unreadable_date_only_matches_all(self, repository, seed):
        seed((1, "salary", "not-a-date"))
        assert repository.filtered(date_range="year") == []
        assert len(repository.filtered()) == 1

    def test_combined_filters(self, repository, seed, today):
        seed((1, "salary", today), (2, "freelance", today), (3, "salary", "2025-06-01"))
        assert [e["amount"] for e in repository.filtered("salary", "month")] == [1]


class TestTotals:
    """Test permissive amount parsing."""

    def test_invalid_amounts_count_as_zero(self):
        earnings = [{"amount": "12.5"}, {"amount": "abc"}, {}, {"amount": None}, {"amount": 7},
                    {"amount": float("nan")}, {"amount": [1]}, "garbage"]
        assert EarningsRepository.total(earnings) == 19.5

    def test_empty_total(self):
        assert EarningsRepository.total([]) == 0.0

    def test_category_totals_partition_the_total(self, repository, seed, today):
        seed((100, "salary", today), ("50.5", "freelance", today), ("x", "salary", today),
             (25, "cashback", "2024-02-29"), (10, "freelance", "bad"))
        categories = {e["category"] for e in repository.all()}
        parts = sum(repository.total(repository.filtered(category=c)) for c in categories)
        assert parts == pytest.approx(repository.total(repository.all()))

    @pytest.mark.parametrize("value,expected", [("3", 3.0), (True, 0.0), ("inf", 0.0), (None, 0.0)])
    def test_parse_amount(self, value, expected):
        assert parse_amount(value) == expected


class TestSummary:
    """Test the dashboard summary card."""

    def test_empty_summary(self, repository):
        assert repository.summary().model_dump(by_alias=True) == {
            "total": 0,
            "weekly": 0,
            "weeklyCount": 0,
            "monthly": 0,
            "monthlyCount": 0,
            "lastMonth": 0,
            "trend": "0.0",
        }

    def test_positive_trend(self, repository, seed):
        seed((1500, "salary", "2026-10-05"), (1000, "salary", "2026-09-15"))
        summary = repository.summary()
        assert summary.monthly == 1500
        assert summary.last_month == 1000
        assert summary.trend == "50.0"

    def test_negative_trend(self, repository, seed):
        seed((500, "salary", "2026-10-05"), (2000, "salary", "2026-09-01"))
        assert repository.summary().trend == "-75.0"

    def test_zero_baseline_trend_is_flat(self, repository, seed):
        """No earnings last month reads as 0.0, even with earnings this month."""
        seed((500, "salary", "2026-10-05"))
        assert repository.summary().trend == "0.0"

    def test_last_month_is_the_full_previous_month(self, repository, seed):
        seed((1, "salary", "2026-09-01"), (2, "salary", "2026-09-30"), (4, "salary", "2026-08-31"))
        assert repository.summary().last_month == 3

    def test_weekly_window_is_seven_days_including_today(self, repository, seed, today):
        seed((1, "salary", today), (2, "salary", today - timedelta(days=6)),
             (4, "salary", today - timedelta(days=7)))
        summary = repository.summary()
        assert summary.weekly == 3
        assert summary.weekly_count == 2
        assert summary.total == 7

    def test_yearly(self, repository, seed):
        seed((5, "salary", "2026-01-01"), (7, "salary", "2025-12-31"))
        assert repository.yearly() == {"total": 5.0, "count": 1}


class TestGrouping:
    """Test by-source, by-date and monthly buckets."""

    def test_by_source_keeps_first_seen_order(self, repository, seed, today):
        seed((100, "freelance", today), (500, "salary", today), (50, "freelance", today))
        assert list(repository.by_source().items()) == [("freelance", 150.0), ("salary", 500.0)]

    def test_non_string_categories_count_as_missing(self, repository, store, seed, today):
        seed((100, "salary", today), (40, ["salary"], today), (7, {"name": "freelance"}, today))
        assert repository.by_source() == {"salary": 100.0}
        assert repository.total(repository.filtered(category="salary")) == 100
        assert repository.summary().weekly == 147

    def test_non_string_dates_never_match_a_day(self, repository, store, today):
        store.save_earnings([{"id": "a", "amount": 5, "category": "salary", "date": [today.isoformat()]},
                             {"id": "b", "amount": 3, "category": "salary", "date": today.isoformat()}])
        assert repository.by_date(1) == {today.isoformat(): 3.0}

    @pytest.mark.parametrize("window", [1, 7, 30])
    def test_by_date_has_one_key_per_day(self, repository, today, window):
        by_date = repository.by_date(window)
        assert len(by_date) == window
        assert list(by_date)[-1] == today.isoformat()
        assert list(by_date)[0] == (today - timedelta(days=window - 1)).isoformat()
        assert set(by_date.values()) == {0.0}

    def test_by_date_counts_exact_date_strings_only(self, repository, seed, today):
        seed((10, "salary", today), (5, "salary", today), (99, "salary", f"{today.isoformat()}T08:00:00"),
             (7, "salary", today - timedelta(days=2)), (3, "salary", today - timedelta(days=40)))
        by_date = repository.by_date(7)
        assert by_date[today.isoformat()] == 15
        assert by_date[(today - timedelta(days=2)).isoformat()] == 7
        assert sum(by_date.values()) == 22

    def test_monthly_totals_window(self, repository, seed):
        seed((100, "salary", "2026-10-03"), (40, "salary", "2026-08-20"), (60, "salary", "2026-08-01"),
             (999, "salary", "2026-04-30"))
        buckets = repository.monthly_totals(6)

        assert list(buckets) == ["2026-05", "2026-06", "2026-07", "2026-08", "2026-09", "2026-10"]
        assert [b.label for b in buckets.values()] == ["May", "Jun", "Jul", "Aug", "Sep", "Oct"]
        assert [b.total for b in buckets.values()] == [0, 0, 0, 100, 0, 100]

    def test_monthly_totals_empty_and_across_years(self, store):
        repository = EarningsRepository(store, clock=lambda: date(2026, 2, 10))
        buckets = repository.monthly_totals(3)
        assert list(buckets) == ["2025-12", "2026-01", "2026-02"]
        assert all(b.total == 0 for b in buckets.values())


class TestFormatting:
    """Test display helpers used in insight text."""

    @pytest.mark.parametrize("amount,expected", [
        (0, "0"), (500, "500"), (12.5, "12.5"), (71.4285714, "71.429"), (999, "999"),
        (1500, "1.5K"), (25000, "25.0K"), (250000, "2.5L"), ("abc", "0"),
    ])
    def test_format_amount(self, amount, expected):
        assert format_amount(amount) == expected

    @pytest.mark.parametrize("value,expected", [
        ("2026-10-19", "Today"),
        ("2026-10-25", "Today"),
        ("2026-10-18", "Yesterday"),
        ("2026-10-01", "1 Oct"),
        ("2025-03-04", "4 Mar 2025"),
        ("garbage", "garbage"),
    ])
    def test_format_date(self, today, value, expected):
        assert format_date(value, today) == expected
