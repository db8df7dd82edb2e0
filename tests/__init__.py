"""
Earnings Analyzer Test Suite

- test_storage.py: entity store defaults, merge updates, SQL backend
- test_earnings.py: earning CRUD, filtering, totals, summary and chart buckets
- test_analytics.py: statistics, streak and insight generation
- test_goals.py: goal progress, achievements and tips
- test_notifications.py: notification sink and message builders
- test_seed_db.py: demo seeding helper

Run all tests:
    pytest tests/

Run with verbose output:
    pytest tests/ -v
"""
