"""Unit tests for sync.models module."""

from src.sync.models import QueryOptions, SyncReport


class TestQueryOptions:
    """Test cases for QueryOptions."""

    def test_defaults(self):
        assert QueryOptions().to_kwargs() == {
            'filter': None,
            'sorts': None,
            'archived': None,
            'filter_properties': None,
            'page_size': 100,
        }


class TestSyncReport:
    """Test cases for SyncReport."""

    def test_counts(self):
        report = SyncReport(created=['a'], updated=['b', 'c'], skipped=['d'])

        assert report.write_count == 3
        assert report.has_failures is False

    def test_failures(self):
        assert SyncReport(failed=['x']).has_failures is True
