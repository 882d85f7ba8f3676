"""
Pydantic schemas for parsed hand histories.
Defines data structures for hands, players, actions, streets and game context.

All monetary fields are integers in minor units: tournament chips are used
as-is, cash amounts are cents.
"""

from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict

# Type definitions
ActionKind = Literal[
    "fold", "check", "call", "bet", "raise", "all-in",
    "ante", "small-blind", "big-blind", "uncalled-return", "shows"
]

StreetName = Literal["preflop", "flop", "turn", "river"]

Site = Literal["pokerstars", "ggpoker", "partypoker"]

PlayerStatus = Literal["active", "sitting-out", "disconnected"]

ConfidenceTier = Literal["high", "medium", "low"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class GameContext(_Frozen):
    """How numeric literals of a hand are to be read."""
    is_tournament: bool
    currency_unit: str                   # "chips", "USD", "EUR", "GBP"
    conversion_needed: bool              # True = decimal currency scaled to cents
    is_high_stakes: bool = False
    confidence: ConfidenceTier = "medium"
    signals: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()


class Action(_Frozen):
    """A single player action; amounts already in minor units."""
    kind: ActionKind
    actor: str
    key: str
    amount: int = 0                      # Figure printed on the line
    raise_by: Optional[int] = None       # Raise delta ("raises X to Y": X)
    total_bet: Optional[int] = None      # Street total after a raise ("to Y")
    is_all_in: bool = False
    cards: Tuple[str, ...] = ()          # Only for "shows"


class Street(_Frozen):
    """Community cards revealed on a street and the actions taken on it."""
    name: StreetName
    cards: Tuple[str, ...] = ()
    actions: Tuple[Action, ...] = ()


class Player(_Frozen):
    """Represents a player at the table."""
    name: str
    key: str
    seat: int
    stack: int
    position: Optional[str] = None
    hole_cards: Tuple[str, ...] = ()
    is_hero: bool = False
    status: PlayerStatus = "active"
    bounty: Optional[int] = None


class Showdown(_Frozen):
    """What the text itself records about who won."""
    info: str = ""
    winners: Tuple[str, ...] = ()
    winner_keys: Tuple[str, ...] = ()
    pot_won: int = 0
    collections: Dict[str, int] = {}
    # Pot index (0 = main, 1.. = side pots) -> key -> amount, from labelled lines only
    pot_collections: Dict[int, Dict[str, int]] = {}


class HandHistory(_Frozen):
    """Complete, immutable parse result for one hand."""
    # Metadata
    hand_id: str
    site: Site
    game_type: str = "Hold'em"
    limit: str = "No Limit"
    stakes: str = ""
    table_name: Optional[str] = None
    tournament_id: Optional[str] = None
    timestamp: Optional[str] = None

    # Table info
    max_players: int
    button_seat: int
    small_blind: int
    big_blind: int
    ante: int = 0
    context: GameContext
    currency: str = "chips"

    # Players and action
    players: Tuple[Player, ...]
    posts: Tuple[Action, ...] = ()
    preflop: Street
    flop: Optional[Street] = None
    turn: Optional[Street] = None
    river: Optional[Street] = None

    # Results
    showdown: Optional[Showdown] = None
    total_pot: int = 0
    rake: int = 0

    warnings: Tuple[str, ...] = ()

    def streets(self) -> Tuple[Street, ...]:
        """Streets that were reached, in order."""
        return tuple(s for s in (self.preflop, self.flop, self.turn, self.river) if s is not None)

    @property
    def board(self) -> Tuple[str, ...]:
        cards: Tuple[str, ...] = ()
        for street in self.streets():
            cards += street.cards
        return cards

    def player(self, key: str) -> Optional[Player]:
        for p in self.players:
            if p.key == key:
                return p
        return None

    @property
    def hero(self) -> Optional[Player]:
        for p in self.players:
            if p.is_hero:
                return p
        return None
