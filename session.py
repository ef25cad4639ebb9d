"""
session.py
----------
Session coordinator: joins the position request and the dataset load,
then ranks the dataset against the position.

Both acquisitions run concurrently as asyncio tasks whose blocking I/O is
pushed to a worker thread. Their completions call one named transition each
on the SessionCoordinator, always from the event loop thread, so the state
needs no locking. Selection is a pure function of the coordinator's current
position and dataset and is re-run whenever either input changes.

Phases::

    IDLE -> AWAITING -> POSITION_ERROR | DATASET_ERROR   (terminal)
                     -> READY -> SELECTING -> SELECTED

Usage
-----
from dataset_profiles import get_profile
from geo_position import StaticLocationService
from session import find_nearest

coordinator = find_nearest(StaticLocationService(12.97, 77.59), get_profile("bloodbank"))
view = coordinator.view()
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from dataset_parser import load_dataset
from dataset_profiles import DatasetProfile
from geo_position import LocationService, acquire_position
from location_errors import DatasetError, NearestFinderError, PositionError
from location_models import Coordinate, Dataset, PresenterView, RankedRecord
from nearest_selector import select_nearest

__all__ = ["SessionPhase", "SessionCoordinator", "run_session", "find_nearest"]

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    IDLE = "Idle"
    AWAITING = "Awaiting"
    POSITION_ERROR = "PositionError"
    DATASET_ERROR = "DatasetError"
    READY = "Ready"
    SELECTING = "Selecting"
    SELECTED = "Selected"


_TERMINAL = (SessionPhase.POSITION_ERROR, SessionPhase.DATASET_ERROR)


class SessionCoordinator:
    """Owns the session state; one transition method per completion event."""

    def __init__(self, profile: DatasetProfile, k: Optional[int] = None,
                 listener: Optional[Callable[[PresenterView], None]] = None):
        self.profile = profile
        self.k = profile.k if k is None else k
        if self.k < 0:
            raise ValueError(f"k must be non-negative, got {self.k}")
        self._listener = listener

        self.position: Optional[Coordinate] = None
        self.dataset: Optional[Dataset] = None
        self.position_error: Optional[PositionError] = None
        self.dataset_error: Optional[DatasetError] = None
        self.results: List[RankedRecord] = []
        self._phase = SessionPhase.IDLE
        self._first_error: Optional[NearestFinderError] = None

    # -------------------------
    # State inspection
    # -------------------------

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def error(self) -> Optional[NearestFinderError]:
        """The error that ended the session, if any."""
        return self._first_error

    @property
    def error_code(self) -> Optional[str]:
        err = self._first_error
        if err is None:
            return None
        if isinstance(err, PositionError):
            return err.code
        return f"DatasetError:{type(err).__name__}"

    @property
    def dataset_ready(self) -> bool:
        return self.dataset is not None

    def view(self) -> PresenterView:
        return PresenterView(
            loading=self._phase not in _TERMINAL and self._phase is not SessionPhase.SELECTED,
            error=str(self._first_error) if self._first_error is not None else None,
            user_position=self.position,
            results=list(self.results),
        )

    # -------------------------
    # Transitions
    # -------------------------

    def start(self) -> None:
        if self._phase is not SessionPhase.IDLE:
            raise RuntimeError(f"Session already started (phase {self._phase.value})")
        self._enter(SessionPhase.AWAITING)

    def position_acquired(self, position: Coordinate) -> None:
        self.position = position
        self._advance()

    def position_failed(self, error: PositionError) -> None:
        self.position_error = error
        self._fail(error, SessionPhase.POSITION_ERROR)

    def dataset_loaded(self, dataset: Dataset) -> None:
        # replaced wholesale, never merged
        self.dataset = tuple(dataset)
        self._advance()

    def dataset_failed(self, error: DatasetError) -> None:
        self.dataset_error = error
        self._fail(error, SessionPhase.DATASET_ERROR)

    def _fail(self, error: NearestFinderError, phase: SessionPhase) -> None:
        logger.warning("%s", error)
        if self._phase in _TERMINAL:
            # first error is the one reported; the later one is kept on its own slot
            self._notify()
            return
        self._first_error = error
        self._enter(phase)

    def _advance(self) -> None:
        if self._phase in _TERMINAL:
            self._notify()
            return
        if self.position is None or self.dataset is None:
            self._enter(SessionPhase.AWAITING)
            return
        self._enter(SessionPhase.READY, notify=False)
        self._select()

    def _select(self) -> None:
        self._enter(SessionPhase.SELECTING, notify=False)
        self.results = select_nearest(self.position, self.dataset, self.k)
        self._enter(SessionPhase.SELECTED)

    def _enter(self, phase: SessionPhase, notify: bool = True) -> None:
        if phase is not self._phase:
            logger.debug("session %s: %s -> %s", self.profile.name, self._phase.value, phase.value)
        self._phase = phase
        if notify:
            self._notify()

    def _notify(self) -> None:
        if self._listener is not None:
            self._listener(self.view())


async def run_session(
    service: Optional[LocationService],
    profile: DatasetProfile,
    *,
    source: Optional[str | Path] = None,
    k: Optional[int] = None,
    high_accuracy: bool = True,
    listener: Optional[Callable[[PresenterView], None]] = None,
) -> SessionCoordinator:
    """Acquire the position and load the dataset concurrently, then select."""
    coordinator = SessionCoordinator(profile, k=k, listener=listener)
    source = source or profile.default_source
    coordinator.start()

    async def _acquire() -> None:
        try:
            position = await asyncio.to_thread(acquire_position, service, high_accuracy=high_accuracy)
        except PositionError as e:
            coordinator.position_failed(e)
        else:
            coordinator.position_acquired(position)

    async def _load() -> None:
        try:
            dataset = await asyncio.to_thread(load_dataset, source, profile)
        except DatasetError as e:
            coordinator.dataset_failed(e)
        else:
            coordinator.dataset_loaded(dataset)

    await asyncio.gather(_acquire(), _load())
    return coordinator


def find_nearest(service: Optional[LocationService], profile: DatasetProfile, **kwargs) -> SessionCoordinator:
    """Blocking wrapper around run_session for scripts and the CLI."""
    return asyncio.run(run_session(service, profile, **kwargs))
