"""
Service layer for team balancing requests.
"""

import logging
import threading
from collections import deque
from collections.abc import Iterable, Mapping
from typing import Any

from balancer import TeamBalancer
from config import DIVERSITY_HISTORY_SIZE
from domain.models.balance_result import BalanceResult
from domain.models.constraint import ConstraintType, TeamConstraint
from domain.models.player import NO_POSITION, Player
from domain.models.team import HASH_ID_SEPARATOR, HASH_TEAM_SEPARATOR
from services import error_codes
from services.result import Result

logger = logging.getLogger("team_balancer.balance_service")

# Single-position fields accepted alongside the list fields
_LEGACY_POSITION_FIELDS = {
    "primary_positions": "primary_position",
    "secondary_positions": "secondary_position",
    "tertiary_positions": "tertiary_position",
}

_TRUE_STRINGS = {"1", "true", "yes", "on"}


class InvalidRequestError(ValueError):
    """Raised internally while parsing a request; carries an error code."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


def _parse_flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _check_player_id(player_id: str) -> None:
    if HASH_ID_SEPARATOR in player_id or HASH_TEAM_SEPARATOR in player_id:
        raise InvalidRequestError(
            f"Player id {player_id!r} must not contain {HASH_ID_SEPARATOR!r} or {HASH_TEAM_SEPARATOR!r}",
            error_codes.INVALID_PLAYER,
        )


def _parse_positions(raw: Mapping[str, Any], field_name: str) -> list[str]:
    value = raw.get(field_name)
    if value is None:
        value = raw.get(_LEGACY_POSITION_FIELDS[field_name])
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise InvalidRequestError(
            f"{field_name} must be a list of position tags", error_codes.INVALID_PLAYER
        )
    return [v for v in value if v and v != NO_POSITION]


def player_from_dict(raw: Mapping[str, Any]) -> Player:
    """
    Build a Player from a dict-shaped roster record.

    Accepts either list fields (primary_positions, ...) or single-value
    fields (primary_position, ...); "NONE" entries are dropped.

    Raises:
        InvalidRequestError: If the id or tier is missing or malformed
    """
    if "id" not in raw or raw["id"] is None or raw["id"] == "":
        raise InvalidRequestError("Player record is missing an id", error_codes.INVALID_PLAYER)
    player_id = str(raw["id"])
    _check_player_id(player_id)

    tier = raw.get("tier", 1)
    if not isinstance(tier, int) or isinstance(tier, bool) or tier < 1:
        raise InvalidRequestError(
            f"Player {player_id} has invalid tier {tier!r}", error_codes.INVALID_PLAYER
        )

    return Player(
        id=player_id,
        name=str(raw.get("name") or player_id),
        tier=tier,
        is_active=_parse_flag(raw.get("is_active"), True),
        primary_positions=_parse_positions(raw, "primary_positions"),
        secondary_positions=_parse_positions(raw, "secondary_positions"),
        tertiary_positions=_parse_positions(raw, "tertiary_positions"),
    )


def constraint_from_dict(raw: Mapping[str, Any]) -> TeamConstraint:
    """
    Build a TeamConstraint from a dict with "type" and "player_ids".

    Raises:
        InvalidRequestError: If the type is unknown or player_ids is not a list
    """
    raw_type = str(raw.get("type", "")).upper()
    try:
        constraint_type = ConstraintType(raw_type)
    except ValueError:
        raise InvalidRequestError(
            f"Unknown constraint type {raw.get('type')!r}", error_codes.INVALID_CONSTRAINT
        ) from None

    player_ids = raw.get("player_ids")
    if not isinstance(player_ids, (list, tuple)):
        raise InvalidRequestError(
            "Constraint player_ids must be a list", error_codes.INVALID_CONSTRAINT
        )
    raw_id = raw.get("id")
    return TeamConstraint(
        type=constraint_type,
        player_ids=[str(pid) for pid in player_ids],
        id=str(raw_id) if raw_id is not None else None,
    )


class BalanceService:
    """
    Service for balancing requests coming from an outer layer.

    Validates caller input, converts dict-shaped records into domain models,
    and remembers recent partition hashes so repeated requests avoid
    repeating the same teammate pairings.
    """

    def __init__(self, balancer: TeamBalancer | None = None, history_size: int | None = None):
        self.balancer = balancer or TeamBalancer()
        size = history_size if history_size is not None else DIVERSITY_HISTORY_SIZE
        self._history: deque[str] = deque(maxlen=max(0, size))
        self._history_lock = threading.Lock()

    def balance(
        self,
        roster: Iterable[Player | Mapping[str, Any]],
        team_count: int,
        quotas: Mapping[str, int | None] | None = None,
        constraints: Iterable[TeamConstraint | Mapping[str, Any]] | None = None,
        use_history: bool = True,
    ) -> Result[BalanceResult]:
        """
        Balance a roster into teams.

        An empty active roster is not an error; it yields an empty result.

        Args:
            roster: Players, as Player objects or dicts
            team_count: Number of teams (>= 1)
            quotas: Position -> per-team count, or None for unconstrained
            constraints: MATCH/SPLIT constraints, as TeamConstraint objects or dicts
            use_history: Feed remembered partition hashes to the balancer and
                remember the new one

        Returns:
            Result.ok(BalanceResult) on success
            Result.fail(error, code) for invalid input
        """
        if not isinstance(team_count, int) or isinstance(team_count, bool) or team_count < 1:
            return Result.fail(
                f"team_count must be a positive integer, got {team_count!r}",
                code=error_codes.INVALID_TEAM_COUNT,
            )

        try:
            players = self._parse_roster(roster)
            parsed_constraints = [
                c if isinstance(c, TeamConstraint) else constraint_from_dict(c)
                for c in constraints or ()
            ]
            self._validate_quotas(quotas)
        except InvalidRequestError as exc:
            logger.info(f"Rejected balancing request: {exc}")
            return Result.fail(str(exc), code=exc.code)

        with self._history_lock:
            previous_hashes = list(self._history) if use_history else []

        result = self.balancer.generate_balanced_teams(
            players,
            team_count,
            quotas=quotas,
            constraints=parsed_constraints,
            previous_hashes=previous_hashes,
        )

        if use_history and result.hash and self._history.maxlen:
            with self._history_lock:
                self._history.append(result.hash)
        return Result.ok(result)

    def get_history(self) -> list[str]:
        """Remembered partition hashes, oldest first."""
        with self._history_lock:
            return list(self._history)

    def clear_history(self) -> None:
        with self._history_lock:
            self._history.clear()

    def _parse_roster(self, roster: Iterable[Player | Mapping[str, Any]]) -> list[Player]:
        if roster is None or isinstance(roster, (str, bytes, Mapping)):
            raise InvalidRequestError("Roster must be a list of players", error_codes.INVALID_ROSTER)

        players: list[Player] = []
        seen: set[str] = set()
        for record in roster:
            if isinstance(record, Player):
                _check_player_id(record.id)
                player = record
            elif isinstance(record, Mapping):
                player = player_from_dict(record)
            else:
                raise InvalidRequestError(
                    f"Unsupported roster entry {record!r}", error_codes.INVALID_ROSTER
                )
            if player.id in seen:
                raise InvalidRequestError(
                    f"Player {player.id} appears more than once", error_codes.DUPLICATE_PLAYER
                )
            seen.add(player.id)
            players.append(player)
        return players

    def _validate_quotas(self, quotas: Mapping[str, int | None] | None) -> None:
        if quotas is None:
            return
        if not isinstance(quotas, Mapping):
            raise InvalidRequestError("Quotas must be a mapping", error_codes.INVALID_QUOTA)
        for position, count in quotas.items():
            if count is None:
                continue
            if isinstance(count, float) and count.is_integer():
                count = int(count)
            if not isinstance(count, int) or isinstance(count, bool) or count < 0:
                raise InvalidRequestError(
                    f"Quota for {position} must be a non-negative integer or None, got {count!r}",
                    error_codes.INVALID_QUOTA,
                )
