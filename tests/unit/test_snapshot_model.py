"""
Unit tests for snapshot models, serialization and configuration helpers.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytz

from piefolio.config.settings import Settings
from piefolio.core.timezone import parse_datetime_utc, to_utc
from piefolio.domain.models import snapshot_from_json, snapshot_to_json
from tests.conftest import make_snapshot, utc_datetime


class TestSnapshotSerialization:

    def test_json_is_deterministic(self):
        snapshot = make_snapshot({"B": "2", "A": "1"})

        assert snapshot_to_json(snapshot) == snapshot_to_json(make_snapshot({"B": "2", "A": "1"}))

    def test_money_kept_exact(self):
        snapshot = make_snapshot({"A": "0.10"})

        restored = snapshot_from_json(snapshot_to_json(snapshot))

        assert restored.pies[0].total_invested == Decimal("0.10")
        assert str(restored.pies[0].total_invested) == "0.10"

    def test_fetched_at_normalized_to_utc(self):
        sofia = pytz.timezone("Europe/Sofia").localize(datetime(2025, 3, 1, 12, 0))
        snapshot = make_snapshot({"A": "1"}, fetched_at=sofia)

        restored = snapshot_from_json(snapshot_to_json(snapshot))

        assert restored.fetched_at == sofia
        assert restored.fetched_at.utcoffset() == timedelta(0)


class TestSnapshotAge:

    def test_age_seconds(self):
        snapshot = make_snapshot({"A": "1"}, fetched_at=utc_datetime(2025, 3, 1, 10, 0))

        assert snapshot.age_seconds(utc_datetime(2025, 3, 1, 10, 5)) == 300.0

    def test_naive_times_are_treated_as_utc(self):
        assert to_utc(datetime(2025, 3, 1, 10, 0)) == utc_datetime(2025, 3, 1, 10, 0)
        assert parse_datetime_utc("2025-03-10 00:00:00") == utc_datetime(2025, 3, 10, 0, 0)


class TestSettings:

    def test_database_url_derived_from_data_dir(self, tmp_path):
        settings = Settings(_env_file=None, data_dir=tmp_path)

        assert settings.get_database_url() == f"sqlite:///{tmp_path / 'piefolio.db'}"

    def test_explicit_database_url_wins(self):
        settings = Settings(_env_file=None, database_url="sqlite:///:memory:")

        assert settings.get_database_url() == "sqlite:///:memory:"
