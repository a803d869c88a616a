"""Match controller: owns both sides' state and drives turn order."""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from armada.ai.targeting import Difficulty, select_computer_shot
from armada.config import GameMode, GameSettings
from armada.telemetry import get_meter, get_tracer, record_game_metric

from .grid import Fleet, Grid, accuracy, create_empty_grid, generate_fleet, place_ship
from .powerups import PowerUpOutcome, apply_area_scan, apply_area_strike, apply_shield
from .resolver import ShotOutcome, ShotResult, resolve_shot
from .ship import Coordinate, ShipType

logger = logging.getLogger(__name__)
tracer = get_tracer("armada.engine.game")
meter = get_meter("armada.engine.game")

ACTION_COUNTER = meter.create_counter(
    "armada_engine_actions",
    unit="1",
    description="Turn actions taken in a Match",
)

MAX_LOG_ENTRIES = 50


class GamePhase(Enum):
    """High-level lifecycle of a match."""

    PLACEMENT = "placement"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class Side(Enum):
    """The two sides of a match. B is the computer in single-player mode."""

    A = "a"
    B = "b"

    def opponent(self) -> Side:
        return Side.B if self is Side.A else Side.A


class LogKind(Enum):
    PLAYER = "player"
    ENEMY = "enemy"
    SYSTEM = "system"
    SUCCESS = "success"


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    message: str
    kind: LogKind


class CombatLog:
    """Newest-first log of match events, keeping the latest 50."""

    def __init__(self, limit: int = MAX_LOG_ENTRIES) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=limit)

    def add(self, message: str, kind: LogKind = LogKind.SYSTEM) -> LogEntry:
        entry = LogEntry(datetime.now().strftime("%H:%M:%S"), message, kind)
        self._entries.appendleft(entry)
        return entry

    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class SideState:
    name: str
    grid: Grid
    fleet: Fleet
    cp: int = 0


@dataclass(frozen=True)
class MatchState:
    """Immutable snapshot of the current match."""

    phase: GamePhase
    mode: GameMode
    difficulty: Difficulty
    turn: Side
    winner: Side | None
    sides: dict[Side, SideState]


class Match:
    """Coordinates a match between two sides.

    The engine functions underneath are pure; this class is the shell that
    keeps the current grids, fleets and CP balances and swaps them for the
    updated values each action returns.
    """

    def __init__(self, settings: GameSettings | None = None, rng_seed: int | None = None) -> None:
        self.settings = settings or GameSettings()
        self._rng = random.Random(rng_seed)
        self.log = CombatLog()
        self.phase = GamePhase.PLACEMENT
        self.turn = Side.A
        self.winner: Side | None = None
        self._sides: dict[Side, SideState] = {
            Side.A: SideState(self.settings.side_a_name, create_empty_grid(), Fleet()),
            Side.B: SideState(self.settings.side_b_name, create_empty_grid(), Fleet()),
        }
        if self.mode is GameMode.SINGLE:
            self.auto_arrange(Side.B)
        protocol = "SOLO" if self.mode is GameMode.SINGLE else "DUAL"
        self.log.add(f"INITIALIZING {protocol} OPS PROTOCOL...")

    @property
    def mode(self) -> GameMode:
        return self.settings.mode

    @property
    def difficulty(self) -> Difficulty:
        return self.settings.difficulty

    @property
    def attacker(self) -> Side:
        return self.turn

    @property
    def defender(self) -> Side:
        return self.turn.opponent()

    def state(self, side: Side) -> SideState:
        return self._sides[side]

    def name(self, side: Side) -> str:
        return self._sides[side].name

    def grid(self, side: Side) -> Grid:
        return self._sides[side].grid

    def fleet(self, side: Side) -> Fleet:
        return self._sides[side].fleet

    def cp(self, side: Side) -> int:
        return self._sides[side].cp

    def is_computer(self, side: Side) -> bool:
        return self.mode is GameMode.SINGLE and side is Side.B

    def observed_grid(self, side: Side) -> Grid:
        """What `side` can see of its opponent's grid."""
        return self.grid(side.opponent()).observed()

    def accuracy(self, side: Side) -> int:
        return accuracy(self.grid(side.opponent()))

    def ships_afloat(self, side: Side) -> int:
        return self.fleet(side).afloat()

    def valid_moves(self, side: Side) -> list[Coordinate]:
        """Coordinates `side` may still strike; empty outside of play."""
        if self.phase is not GamePhase.IN_PROGRESS:
            return []
        return self.grid(side.opponent()).unresolved()

    def snapshot(self) -> MatchState:
        return MatchState(
            phase=self.phase,
            mode=self.mode,
            difficulty=self.difficulty,
            turn=self.turn,
            winner=self.winner,
            sides=dict(self._sides),
        )

    # Placement

    def place_ship(
        self, side: Side, ship_type: ShipType, x: int, y: int, horizontal: bool = True
    ) -> None:
        """Deploy one ship for `side`; raises PlacementError if it does not fit."""
        self._require_phase(GamePhase.PLACEMENT, side)
        current = self._sides[side]
        grid, fleet = place_ship(
            current.grid, current.fleet, ship_type, x, y, horizontal, owner=side.value
        )
        self._sides[side] = replace(current, grid=grid, fleet=fleet)

    def auto_arrange(self, side: Side) -> None:
        """Replace whatever `side` has deployed with a random full fleet."""
        self._require_phase(GamePhase.PLACEMENT, side)
        grid, fleet = generate_fleet(self._rng, owner=side.value)
        self._sides[side] = replace(self._sides[side], grid=grid, fleet=fleet)

    def reset_placement(self, side: Side) -> None:
        self._require_phase(GamePhase.PLACEMENT, side)
        self._sides[side] = replace(self._sides[side], grid=create_empty_grid(), fleet=Fleet())

    def start(self) -> None:
        """Begin play once both fleets are fully deployed."""
        with tracer.start_as_current_span("game.start"):
            self._require_phase(GamePhase.PLACEMENT, Side.A)
            incomplete = [side.value for side in Side if not self.fleet(side).is_complete()]
            if incomplete:
                logger.error("match_start_rejected", extra={"incomplete_sides": incomplete})
                raise RuntimeError("Both fleets must be fully deployed before the match starts.")
            self.phase = GamePhase.IN_PROGRESS
            self.turn = Side.A
            self.winner = None
            self.log.add("ALL VESSELS DEPLOYED. READY FOR ENGAGEMENT.")
            logger.info(
                "match_started",
                extra={"mode": self.mode.value, "difficulty": self.difficulty.value},
            )

    # Turn actions

    def fire(self, side: Side, x: int, y: int) -> ShotOutcome:
        """Strike (x, y) on the opponent's grid.

        A REJECTED outcome (out of bounds or already struck) changes nothing
        and keeps the turn with `side`.
        """
        with tracer.start_as_current_span("game.fire") as span:
            span.set_attribute("side", side.value)
            span.set_attribute("x", x)
            span.set_attribute("y", y)
            self._require_turn(side)
            target = self._sides[side.opponent()]
            outcome = resolve_shot(target.grid, target.fleet, x, y, owner=side.opponent().value)
            span.set_attribute("shot.outcome", outcome.result.value)
            ACTION_COUNTER.add(1, attributes={"action": "fire", "side": side.value})
            if outcome.result is ShotResult.REJECTED:
                return outcome

            self._sides[side.opponent()] = replace(target, grid=outcome.grid, fleet=outcome.fleet)
            self._award(side, outcome.cp_awarded)
            self._log_shot(side, outcome)
            self._end_action(side, outcome.fleet_destroyed, outcome.continue_turn)
            return outcome

    def computer_turn(self) -> ShotOutcome:
        """Let the computer choose and fire a single shot."""
        side = self.turn
        if not self.is_computer(side):
            logger.error("computer_turn_rejected", extra={"turn": side.value})
            raise RuntimeError("It is not the computer's turn.")
        self._require_turn(side)
        target = select_computer_shot(self.observed_grid(side), self.difficulty, self._rng)
        return self.fire(side, target.x, target.y)

    def use_shield(self, side: Side, x: int, y: int) -> PowerUpOutcome:
        """Shield one of `side`'s own ships; this uses up the turn."""
        self._require_turn(side)
        own = self._sides[side]
        outcome = apply_shield(own.grid, own.fleet, x, y, own.cp, owner=side.value)
        ACTION_COUNTER.add(1, attributes={"action": "shield", "side": side.value})
        if not outcome.accepted:
            return outcome
        self._sides[side] = replace(own, fleet=outcome.fleet, cp=outcome.balance)
        ship = self.fleet(side).get(own.grid.cell(Coordinate(x, y)).occupant)
        self.log.add(
            f"{own.name} raises an Aegis Shield over the {ship.ship_type.display_name.upper()}.",
            self._log_kind(side),
        )
        self._end_action(side, False, outcome.continue_turn)
        return outcome

    def use_area_scan(self, side: Side, x: int, y: int) -> PowerUpOutcome:
        """Scan the opponent's waters; the attack is still available afterwards."""
        self._require_turn(side)
        own = self._sides[side]
        target = self._sides[side.opponent()]
        outcome = apply_area_scan(target.grid, x, y, own.cp, owner=side.value)
        ACTION_COUNTER.add(1, attributes={"action": "area_scan", "side": side.value})
        if not outcome.accepted:
            return outcome
        self._sides[side] = replace(own, cp=outcome.balance)
        contacts = sum(1 for reading in outcome.readings if reading.occupied)
        self.log.add(
            f"{own.name} sonar sweep around {Coordinate(x, y).label()}: {contacts} contact(s).",
            self._log_kind(side),
        )
        return outcome

    def use_area_strike(self, side: Side, x: int, y: int) -> PowerUpOutcome:
        """Fire a 3×3 strike in place of the standard attack."""
        self._require_turn(side)
        own = self._sides[side]
        target = self._sides[side.opponent()]
        outcome = apply_area_strike(
            target.grid, target.fleet, x, y, own.cp, owner=side.opponent().value
        )
        ACTION_COUNTER.add(1, attributes={"action": "area_strike", "side": side.value})
        if not outcome.accepted:
            return outcome
        self._sides[side.opponent()] = replace(target, grid=outcome.grid, fleet=outcome.fleet)
        self._sides[side] = replace(self._sides[side], cp=outcome.balance)
        hits = sum(1 for shot in outcome.shots if shot.result.is_hit)
        self.log.add(
            f"{own.name} launches a Trident Missile at {Coordinate(x, y).label()}... "
            f"{hits} HIT(S).",
            LogKind.SUCCESS if hits else self._log_kind(side),
        )
        for shot in outcome.shots:
            if shot.result is ShotResult.SUNK and shot.ship_type is not None:
                self.log.add(
                    f"CONFIRMED! {shot.ship_type.display_name.upper()} neutralised.",
                    LogKind.SUCCESS,
                )
        self._end_action(side, outcome.fleet_destroyed, outcome.continue_turn)
        return outcome

    # Internals

    def _award(self, side: Side, amount: int) -> None:
        if amount:
            current = self._sides[side]
            self._sides[side] = replace(current, cp=current.cp + amount)

    def _end_action(self, side: Side, destroyed: bool, continue_turn: bool) -> None:
        # A destroyed fleet ends the match regardless of turn continuation.
        if destroyed:
            self.winner = side
            self.phase = GamePhase.FINISHED
            self.log.add(f"{self.name(side)} WINS. ENEMY FLEET ELIMINATED.", LogKind.SUCCESS)
            logger.info("match_finished", extra={"winner": side.value})
            record_game_metric(
                "armada_matches_finished_total",
                1,
                {"winner": side.value, "mode": self.mode.value},
            )
        elif not continue_turn:
            self.turn = side.opponent()

    def _log_kind(self, side: Side) -> LogKind:
        return LogKind.ENEMY if self.is_computer(side) else LogKind.PLAYER

    def _log_shot(self, side: Side, outcome: ShotOutcome) -> None:
        label = outcome.target.label()
        ship_name = outcome.ship_type.display_name.upper() if outcome.ship_type else ""
        kind = self._log_kind(side)
        if self.is_computer(side):
            message = f"Enemy fires at {label}... "
            if outcome.result is ShotResult.SUNK:
                message += f"SUNK YOUR {ship_name}!"
            elif outcome.result is ShotResult.HIT:
                message += "DIRECT HIT!"
            elif outcome.result is ShotResult.ABSORBED:
                message += f"YOUR {ship_name} SHIELD ABSORBED THE STRIKE."
            else:
                message += "MISS"
        else:
            message = f"{self.name(side)} strikes {label}... "
            if outcome.result is ShotResult.SUNK:
                message += f"CONFIRMED! {ship_name} neutralised."
                kind = LogKind.SUCCESS
            elif outcome.result is ShotResult.HIT:
                message += "DIRECT HIT!"
            elif outcome.result is ShotResult.ABSORBED:
                message += "STRIKE DEFLECTED BY ENEMY SHIELD."
            else:
                message += "MISS. Strike failed."
        self.log.add(message, kind)

    def _require_phase(self, phase: GamePhase, side: Side) -> None:
        if self.phase is not phase:
            logger.error(
                "action_rejected_wrong_phase",
                extra={"side": side.value, "phase": self.phase.value, "expected": phase.value},
            )
            raise RuntimeError(f"Match is not in the {phase.value} phase.")

    def _require_turn(self, side: Side) -> None:
        self._require_phase(GamePhase.IN_PROGRESS, side)
        if side is not self.turn:
            logger.error(
                "action_rejected_wrong_side",
                extra={"side": side.value, "current": self.turn.value},
            )
            raise RuntimeError("It is not this side's turn.")
