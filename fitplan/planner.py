# fitplan/planner.py
"""
Per-day workout lists and drag-and-drop moves.

A board maps an ISO date ("2024-03-04") to the ordered list of serialized
workouts of that day. Positions inside a day are kept as a dense 0-based
sequence matching the list order.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

Row = Dict[str, Any]
BoardMap = Dict[str, List[Row]]


class MoveError(ValueError):
    pass


class Phase(Enum):
    IDLE = "idle"
    LOADING = "loading"
    EDITING = "editing"
    SAVING = "saving"


@dataclass
class PositionUpdate:
    workout_id: int
    position: int
    workout_date: Optional[str] = None  # only set for the moved workout

    def values(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"position": self.position}
        if self.workout_date is not None:
            out["workout_date"] = self.workout_date
        return out


@dataclass
class MoveResult:
    board: BoardMap
    moved: Row
    updates: List[PositionUpdate]


# ------------------------------
# List helpers
# ------------------------------
def dedupe_by_id(items: Iterable[Row]) -> List[Row]:
    seen = set()
    out = []
    for w in items or []:
        wid = w.get("id")
        if wid is None or wid in seen:
            continue
        seen.add(wid)
        out.append(w)
    return out


def group_by_date(workouts: Iterable[Row]) -> BoardMap:
    board: BoardMap = {}
    for w in workouts:
        board.setdefault(w["workout_date"], []).append(w)
    for key in board:
        board[key] = sorted(dedupe_by_id(board[key]), key=lambda w: (w.get("position") or 0))
    return dict(sorted(board.items()))


def reindex(items: List[Row]) -> List[Row]:
    return [{**w, "position": idx} for idx, w in enumerate(items)]


def _index_of(items: List[Row], workout_id: Any) -> int:
    for idx, w in enumerate(items):
        if w.get("id") == workout_id:
            return idx
    return -1


def _changed(before: List[Row], after: List[Row], skip_id: Any = None) -> List[PositionUpdate]:
    old = {w["id"]: w.get("position") for w in before}
    return [
        PositionUpdate(w["id"], w["position"])
        for w in after
        if w["id"] != skip_id and old.get(w["id"]) != w["position"]
    ]


# ------------------------------
# Moves
# ------------------------------
def move_by_index(
    board: BoardMap,
    from_day: str,
    from_index: int,
    to_day: str,
    to_index: Optional[int] = None,
) -> MoveResult:
    """
    Move the workout at `from_index` of `from_day` to `to_index` of `to_day`
    (appended when `to_index` is None or past the end).

    Returns a new board; the input board is left untouched.
    """
    source = list(board.get(from_day, []))
    if not 0 <= from_index < len(source):
        raise MoveError(f"no workout at index {from_index} on {from_day}")

    moved = source.pop(from_index)
    moved = {**moved, "workout_date": to_day}

    if from_day == to_day:
        target = source
    else:
        target = list(board.get(to_day, []))

    if to_index is None or to_index > len(target):
        to_index = len(target)
    target.insert(max(0, to_index), moved)

    new_board = dict(board)
    reindexed_to = reindex(target)
    new_board[to_day] = reindexed_to

    new_pos = _index_of(reindexed_to, moved["id"])
    moved = reindexed_to[new_pos]
    updates = [PositionUpdate(moved["id"], new_pos, to_day)]

    if from_day != to_day:
        reindexed_from = reindex(source)
        new_board[from_day] = reindexed_from
        updates += _changed(board.get(from_day, []), reindexed_from)
    updates += _changed(board.get(to_day, []), reindexed_to, skip_id=moved["id"])

    return MoveResult(board=new_board, moved=moved, updates=updates)


def move_workout(
    board: BoardMap,
    workout_id: Any,
    from_day: str,
    to_day: str,
    over_id: Any = None,
) -> MoveResult:
    """
    Drag-and-drop move by ids: the workout lands in front of `over_id` in
    the destination day, or at the end when there is no such item (drop on
    the empty part of a column).
    """
    source = board.get(from_day, [])
    from_index = _index_of(source, workout_id)
    if from_index == -1:
        raise MoveError(f"workout {workout_id} is not on {from_day}")

    to_index = None
    if over_id is not None and over_id != workout_id:
        idx = _index_of(board.get(to_day, []), over_id)
        if idx != -1:
            to_index = idx
    elif over_id == workout_id and from_day == to_day:
        to_index = from_index

    return move_by_index(board, from_day, from_index, to_day, to_index)


# ------------------------------
# Page state
# ------------------------------
_TRANSITIONS = {
    Phase.IDLE: {Phase.LOADING, Phase.EDITING, Phase.SAVING},
    Phase.LOADING: {Phase.IDLE},
    Phase.EDITING: {Phase.SAVING, Phase.IDLE},
    Phase.SAVING: {Phase.IDLE},
}


@dataclass
class Board:
    """
    Page-level state of a week/month board.

    Moves are applied optimistically; if persisting them fails the board
    is replaced wholesale by the authoritative rows (`failed`).
    """

    workouts_by_date: BoardMap = field(default_factory=dict)
    phase: Phase = Phase.IDLE
    error: Optional[str] = None

    def _go(self, phase: Phase) -> None:
        if phase not in _TRANSITIONS[self.phase]:
            raise MoveError(f"cannot go from {self.phase.value} to {phase.value}")
        self.phase = phase

    def begin_load(self) -> None:
        self._go(Phase.LOADING)
        self.error = None

    def loaded(self, workouts: Iterable[Row]) -> None:
        self._go(Phase.IDLE)
        self.workouts_by_date = group_by_date(workouts)

    def begin_edit(self) -> None:
        self._go(Phase.EDITING)

    def cancel_edit(self) -> None:
        self._go(Phase.IDLE)

    def begin_save(self) -> None:
        self._go(Phase.SAVING)
        self.error = None

    def saved(self) -> None:
        self._go(Phase.IDLE)

    def failed(self, message: str, authoritative: Optional[Iterable[Row]] = None) -> None:
        self._go(Phase.IDLE)
        self.error = message
        if authoritative is not None:
            self.workouts_by_date = group_by_date(authoritative)

    def apply_move(self, workout_id: Any, from_day: str, to_day: str, over_id: Any = None) -> MoveResult:
        self.begin_save()
        try:
            result = move_workout(self.workouts_by_date, workout_id, from_day, to_day, over_id)
        except MoveError:
            self.phase = Phase.IDLE
            raise
        self.workouts_by_date = result.board
        return result

    def day(self, day_key: str) -> List[Row]:
        return self.workouts_by_date.get(day_key, [])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "error": self.error,
            "workouts_by_date": self.workouts_by_date,
        }
