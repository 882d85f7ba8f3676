"""Structural validation of a parsed hand.

Issues are split by severity: ``critical`` issues make the hand unusable and
abort the parse, ``warning`` issues are attached to the result and parsing
continues.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from ..errors import ErrorCode, HandValidationError
from .schemas import HandHistory
from .utils import RANKS, SUITS

logger = logging.getLogger(__name__)

CRITICAL = "critical"
WARNING = "warning"

BOARD_LENGTH = {"flop": 3, "turn": 1, "river": 1}


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    field: str
    message: str
    severity: str

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "field": self.field,
            "message": self.message,
            "severity": self.severity,
        }


def _critical(code: str, field: str, message: str) -> ValidationIssue:
    return ValidationIssue(code, field, message, CRITICAL)


def _warning(code: str, field: str, message: str) -> ValidationIssue:
    return ValidationIssue(code, field, message, WARNING)


def _check_required(hand: HandHistory) -> Iterable[ValidationIssue]:
    if not hand.hand_id:
        yield _critical("MISSING_HAND_ID", "hand_id", "Hand id is missing")
    if len(hand.players) < 2:
        yield _critical("TOO_FEW_PLAYERS", "players",
                        f"At least two players required, found {len(hand.players)}")
    seats = Counter(p.seat for p in hand.players)
    for seat, n in seats.items():
        if n > 1:
            yield _critical("DUPLICATE_SEAT", "players", f"Seat {seat} is listed {n} times")
    if hand.big_blind <= 0:
        yield _critical("ZERO_BIG_BLIND", "big_blind", "Big blind must be positive")
    if hand.button_seat not in seats:
        yield _warning("BUTTON_NOT_SEATED", "button_seat",
                       f"Button seat {hand.button_seat} has no player")
    if len(hand.players) > hand.max_players:
        yield _warning("SEATS_EXCEED_MAX", "max_players",
                       f"{len(hand.players)} players at a {hand.max_players}-max table")


def _check_money(hand: HandHistory) -> Iterable[ValidationIssue]:
    for field in ("small_blind", "big_blind", "ante", "total_pot", "rake"):
        value = getattr(hand, field)
        if value < 0:
            yield _critical("NEGATIVE_AMOUNT", field, f"{field} is negative ({value})")
    for p in hand.players:
        if p.stack < 0:
            yield _critical("NEGATIVE_AMOUNT", f"players.{p.key}.stack",
                            f"{p.name} has a negative stack ({p.stack})")
    for street in hand.streets():
        for action in street.actions:
            if action.amount < 0 or (action.total_bet is not None and action.total_bet < 0):
                yield _critical("NEGATIVE_AMOUNT", f"{street.name}.actions",
                                f"Negative amount in '{action.kind}' by {action.actor}")


def _legal_card(card: str) -> bool:
    return len(card) == 2 and card[0] in RANKS and card[1] in SUITS


def _check_cards(hand: HandHistory) -> Iterable[ValidationIssue]:
    seen: List[str] = []
    for p in hand.players:
        if len(p.hole_cards) not in (0, 2):
            yield _critical("HOLE_CARD_COUNT", f"players.{p.key}.hole_cards",
                            f"{p.name} has {len(p.hole_cards)} hole cards")
        seen.extend(p.hole_cards)

    for street in hand.streets():
        expected = BOARD_LENGTH.get(street.name)
        if expected is not None and len(street.cards) != expected:
            yield _critical("BOARD_LENGTH", f"{street.name}.cards",
                            f"{street.name} has {len(street.cards)} cards, expected {expected}")
        seen.extend(street.cards)

    for card in seen:
        if not _legal_card(card):
            yield _critical("ILLEGAL_CARD", "cards", f"Illegal card '{card}'")

    for card, n in Counter(seen).items():
        if n > 1:
            yield _critical("DUPLICATE_CARD", "cards", f"Card {card} appears {n} times")

    if hand.turn is not None and hand.flop is None:
        yield _critical("BOARD_ORDER", "turn", "Turn dealt without a flop")
    if hand.river is not None and hand.turn is None:
        yield _critical("BOARD_ORDER", "river", "River dealt without a turn")


def _check_actions(hand: HandHistory) -> Iterable[ValidationIssue]:
    keys = {p.key for p in hand.players}
    for action in hand.posts + tuple(a for s in hand.streets() for a in s.actions):
        if action.key not in keys:
            yield _critical("UNKNOWN_PLAYER", "actions", f"Action by unknown player {action.actor}")


def _check_context(hand: HandHistory) -> Iterable[ValidationIssue]:
    ctx = hand.context
    if ctx.is_tournament and ctx.currency_unit != "chips":
        yield _warning("CONTEXT_UNIT_MISMATCH", "context",
                       f"Tournament hand priced in {ctx.currency_unit}")
    if not ctx.is_tournament and ctx.currency_unit == "chips":
        yield _warning("CONTEXT_UNIT_MISMATCH", "context", "Cash game priced in chips")
    if ctx.confidence == "low":
        yield _warning("LOW_CONFIDENCE_CONTEXT", "context",
                       "Game type could not be determined with confidence")
    if hand.hero is None:
        yield _warning("NO_HERO", "players", "No 'Dealt to' line identifies the hero")

    committed = sum(a.amount for a in hand.posts)
    if hand.total_pot and committed > hand.total_pot:
        yield _warning("POT_BELOW_POSTS", "total_pot",
                       f"Recorded pot {hand.total_pot} is below the posted blinds {committed}")


CHECKS = (_check_required, _check_money, _check_cards, _check_actions, _check_context)


def validate_hand(hand: HandHistory) -> Tuple[List[ValidationIssue], List[ValidationIssue]]:
    """
    Run every check against a parsed hand.

    Returns:
        (critical issues, warning issues)
    """
    critical: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []
    for check in CHECKS:
        for issue in check(hand):
            (critical if issue.severity == CRITICAL else warnings).append(issue)
    return critical, warnings


def validated(hand: HandHistory) -> HandHistory:
    """
    Validate a hand, raising on critical issues and attaching warnings.

    Raises:
        HandValidationError: If any critical issue is found
    """
    critical, warnings = validate_hand(hand)
    if critical:
        logger.warning(f"Hand {hand.hand_id or '?'} failed validation: "
                       f"{'; '.join(i.message for i in critical)}")
        raise HandValidationError(
            critical[0].message if len(critical) == 1
            else f"{critical[0].message} (+{len(critical) - 1} more issues)",
            code=ErrorCode.VAL_CRITICAL,
            details={"issues": [i.to_dict() for i in critical]},
        )

    messages = list(hand.warnings)
    for issue in warnings:
        if issue.message not in messages:
            messages.append(issue.message)
        logger.info(f"Hand {hand.hand_id}: {issue.message}")
    return hand.model_copy(update={"warnings": tuple(messages)})
