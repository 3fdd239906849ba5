"""Tests for per-migration status reporting."""

import pytest

from conftest import ScriptedDriver, make_record
from darwin.models import Migration, Status
from darwin.status import get_status, info


class TestInfo:
    """Tests for the read-only status reporter."""

    def test_empty_history_all_pending(self, scripted_driver: ScriptedDriver, migrations) -> None:
        """Without records every migration is PENDING."""
        infos = info(scripted_driver, migrations)

        assert [i.status for i in infos] == [Status.PENDING] * len(migrations)

    def test_preserves_input_order(self, migrations) -> None:
        """Infos come back in the caller's order, unsorted."""
        driver = ScriptedDriver([make_record(migrations[1])])

        infos = info(driver, migrations)

        assert [i.migration for i in infos] == migrations

    def test_applied_pending_and_ignored(self) -> None:
        """Below the mark and recorded is APPLIED, unrecorded is IGNORED, above is PENDING."""
        m1, m2, m3, m4 = (Migration(version=v) for v in (1.0, 2.0, 3.0, 4.0))
        driver = ScriptedDriver([make_record(m1), make_record(m3)])

        infos = info(driver, [m1, m2, m3, m4])

        assert [i.status for i in infos] == [
            Status.APPLIED,
            Status.IGNORED,
            Status.APPLIED,
            Status.PENDING,
        ]
        assert all(i.error is None for i in infos)

    def test_does_not_validate(self) -> None:
        """Checksum drift and removals don't make info fail."""
        original = Migration(version=1.0, script="SELECT 1;\n")
        edited = original.model_copy(update={"script": "SELECT 2;\n"})
        removed = Migration(version=0.5)
        driver = ScriptedDriver([make_record(removed), make_record(original)])

        infos = info(driver, [edited])

        assert infos[0].status == Status.APPLIED

    def test_does_not_write(self, migrations) -> None:
        """Info never creates tables, runs scripts or inserts records."""
        driver = ScriptedDriver()

        info(driver, migrations)

        assert driver.created == 0
        assert driver.executed == []
        assert driver.records == []

    def test_driver_error_propagates(self, migrations) -> None:
        """The only failure mode is the history fetch."""
        driver = ScriptedDriver()
        driver.fail_all = ConnectionError("gone")

        with pytest.raises(ConnectionError):
            info(driver, migrations)


class TestGetStatus:
    """Tests for the per-migration status rule."""

    def test_no_records_is_pending(self) -> None:
        """The empty-history case has no high-water mark."""
        assert get_status([], Migration(version=0.0)) == Status.PENDING

    def test_equal_to_mark_is_applied(self) -> None:
        """The highest recorded version itself is APPLIED."""
        m = Migration(version=2.0)

        assert get_status([make_record(m)], m) == Status.APPLIED
