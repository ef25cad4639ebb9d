"""Tests for session module: the coordinator and the end-to-end flow."""

import asyncio
from pathlib import Path

import pytest

from dataset_parser import parse_dataset
from dataset_profiles import BLOOD_BANK
from geo_position import StaticLocationService
from location_errors import DatasetLoadError, PositionError, PositionErrorReason
from location_models import Coordinate
from session import SessionCoordinator, SessionPhase, find_nearest, run_session


class DeniedService:
    def get_current_position(self, high_accuracy=True):
        raise PositionError(PositionErrorReason.PERMISSION_DENIED)


class CrashingService:
    def get_current_position(self, high_accuracy=True):
        raise OSError("host location daemon crashed")


def _names(coordinator):
    return [r.record.get("name") for r in coordinator.results]


class TestEndToEnd:
    def test_nearest_is_coincident_record(self, simple_profile, simple_csv: Path):
        coordinator = find_nearest(StaticLocationService(12.97, 77.59), simple_profile, source=simple_csv)
        assert coordinator.phase is SessionPhase.SELECTED
        assert _names(coordinator) == ["A"]
        assert f"{coordinator.results[0].distance_km:.2f}" == "0.00"

    def test_two_nearest_in_order(self, simple_profile, simple_csv: Path):
        coordinator = find_nearest(StaticLocationService(12.97, 77.59), simple_profile, source=simple_csv, k=2)
        assert _names(coordinator) == ["A", "B"]
        assert coordinator.results[0].distance_km < coordinator.results[1].distance_km

    def test_default_source_and_k_come_from_profile(self, simple_profile, simple_csv: Path):
        coordinator = find_nearest(StaticLocationService(13.0, 77.6), simple_profile)
        assert _names(coordinator) == ["B"]

    def test_blood_bank_variant_returns_three(self):
        coordinator = find_nearest(StaticLocationService(12.9575, 77.5640), BLOOD_BANK)
        assert len(coordinator.results) == 3
        assert coordinator.results[0].record.get("name") == "Rashtrotthana Blood Bank"

    def test_permission_denied_does_not_stop_dataset_load(self, simple_profile, simple_csv: Path):
        coordinator = find_nearest(DeniedService(), simple_profile, source=simple_csv)
        assert coordinator.phase is SessionPhase.POSITION_ERROR
        assert coordinator.error_code == "PositionError:PermissionDenied"
        assert coordinator.dataset_ready
        assert len(coordinator.dataset) == 2
        assert coordinator.results == []

    def test_unexpected_service_failure_stays_on_position_path(self, simple_profile, simple_csv: Path):
        coordinator = find_nearest(CrashingService(), simple_profile, source=simple_csv)
        assert coordinator.phase is SessionPhase.POSITION_ERROR
        assert coordinator.error_code == "PositionError:PositionUnavailable"
        assert "host location daemon crashed" in coordinator.view().error
        assert coordinator.dataset_ready
        assert len(coordinator.dataset) == 2

    def test_permission_denied_with_missing_dataset(self, simple_profile, tmp_path: Path):
        coordinator = find_nearest(DeniedService(), simple_profile, source=tmp_path / "missing.csv")
        assert coordinator.phase in (SessionPhase.POSITION_ERROR, SessionPhase.DATASET_ERROR)
        assert coordinator.position_error.reason is PositionErrorReason.PERMISSION_DENIED
        assert isinstance(coordinator.dataset_error, DatasetLoadError)

    def test_dataset_error(self, simple_profile, tmp_path: Path):
        coordinator = find_nearest(StaticLocationService(1.0, 2.0), simple_profile, source=tmp_path / "missing.csv")
        assert coordinator.phase is SessionPhase.DATASET_ERROR
        assert coordinator.error_code == "DatasetError:DatasetLoadError"
        assert coordinator.position == Coordinate(1.0, 2.0)
        view = coordinator.view()
        assert view.loading is False
        assert "missing.csv" in view.error

    def test_no_location_service(self, simple_profile, simple_csv: Path):
        coordinator = find_nearest(None, simple_profile, source=simple_csv)
        assert coordinator.error_code == "PositionError:Unsupported"

    def test_listener_sees_progress(self, simple_profile, simple_csv: Path):
        views = []
        asyncio.run(run_session(StaticLocationService(12.97, 77.59), simple_profile,
                                source=simple_csv, listener=views.append))
        assert views[0].loading is True
        assert views[-1].loading is False
        assert views[-1].error is None
        assert views[-1].user_position == Coordinate(12.97, 77.59)
        assert [r.record.get("name") for r in views[-1].results] == ["A"]


class TestCoordinator:
    @pytest.fixture()
    def dataset(self, simple_profile):
        return parse_dataset("name,lat,lng\nA,12.97,77.59\nB,13.0,77.6\n", simple_profile)

    def test_initial_state(self, simple_profile):
        coordinator = SessionCoordinator(simple_profile)
        assert coordinator.phase is SessionPhase.IDLE
        view = coordinator.view()
        assert view.loading is True
        assert view.error is None
        assert view.results == []

    def test_waits_for_both_inputs(self, simple_profile, dataset):
        coordinator = SessionCoordinator(simple_profile)
        coordinator.start()
        assert coordinator.phase is SessionPhase.AWAITING
        coordinator.dataset_loaded(dataset)
        assert coordinator.phase is SessionPhase.AWAITING
        coordinator.position_acquired(Coordinate(13.0, 77.6))
        assert coordinator.phase is SessionPhase.SELECTED
        assert _names(coordinator) == ["B"]

    def test_reselects_when_position_changes(self, simple_profile, dataset):
        coordinator = SessionCoordinator(simple_profile)
        coordinator.start()
        coordinator.position_acquired(Coordinate(13.0, 77.6))
        coordinator.dataset_loaded(dataset)
        assert _names(coordinator) == ["B"]
        coordinator.position_acquired(Coordinate(12.97, 77.59))
        assert coordinator.phase is SessionPhase.SELECTED
        assert _names(coordinator) == ["A"]

    def test_reselects_when_dataset_replaced(self, simple_profile, dataset):
        coordinator = SessionCoordinator(simple_profile, k=5)
        coordinator.start()
        coordinator.position_acquired(Coordinate(12.97, 77.59))
        coordinator.dataset_loaded(dataset)
        assert _names(coordinator) == ["A", "B"]
        coordinator.dataset_loaded(dataset[1:])
        assert _names(coordinator) == ["B"]

    def test_empty_dataset_selects_nothing(self, simple_profile):
        coordinator = SessionCoordinator(simple_profile)
        coordinator.start()
        coordinator.dataset_loaded(())
        coordinator.position_acquired(Coordinate(0.0, 0.0))
        assert coordinator.phase is SessionPhase.SELECTED
        assert coordinator.results == []

    def test_errors_are_terminal(self, simple_profile, dataset):
        coordinator = SessionCoordinator(simple_profile)
        coordinator.start()
        coordinator.position_failed(PositionError(PositionErrorReason.TIMEOUT))
        coordinator.dataset_loaded(dataset)
        assert coordinator.phase is SessionPhase.POSITION_ERROR
        assert coordinator.results == []

    def test_first_error_is_reported(self, simple_profile):
        coordinator = SessionCoordinator(simple_profile)
        coordinator.start()
        coordinator.dataset_failed(DatasetLoadError("x.csv", "CSV not found"))
        coordinator.position_failed(PositionError(PositionErrorReason.TIMEOUT))
        assert coordinator.phase is SessionPhase.DATASET_ERROR
        assert coordinator.error_code == "DatasetError:DatasetLoadError"
        assert coordinator.position_error.reason is PositionErrorReason.TIMEOUT

    def test_start_twice_raises(self, simple_profile):
        coordinator = SessionCoordinator(simple_profile)
        coordinator.start()
        with pytest.raises(RuntimeError):
            coordinator.start()

    def test_negative_k_rejected(self, simple_profile):
        with pytest.raises(ValueError):
            SessionCoordinator(simple_profile, k=-1)
