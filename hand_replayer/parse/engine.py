"""
Table-driven hand-history parsing engine.

One engine serves every dialect: the differences between sites live in the
pattern tables of dialects.py. A hand is scanned once, line by line, with the
current section (setup, preflop, flop, turn, river, showdown, summary)
deciding which patterns apply.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from ..errors import ErrorCode, ParseError
from ..keys import PlayerIndex, canonical_key
from .context import classify_context
from .dialects import Dialect, HeaderGrammar
from .positions import assign_positions
from .schemas import Action, GameContext, HandHistory, Player, Showdown, Street
from .utils import last_bracket_cards, parse_cards, split_lines, to_minor_units

logger = logging.getLogger(__name__)

BETTING_STREETS = ("preflop", "flop", "turn", "river")

_ROLE_SUFFIX = re.compile(r'\s+\((?:BTN|SB|BB|button|small blind|big blind)\)$', re.IGNORECASE)


class _Seat:
    __slots__ = ("seat", "name", "stack", "bounty", "status")

    def __init__(self, seat: int, name: str, stack: int, bounty: Optional[int], status: str):
        self.seat = seat
        self.name = name
        self.stack = stack
        self.bounty = bounty
        self.status = status


class HandParser:
    """Parses a single hand of one dialect into a HandHistory."""

    def __init__(self, dialect: Dialect):
        self.dialect = dialect

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #

    def parse(self, text: str) -> HandHistory:
        """
        Parse one hand.

        Raises:
            ParseError: For malformed headers, tables, seats, amounts or cards
        """
        lines = split_lines(text)
        start = self._header_index(lines)
        if start:
            logger.debug(f"Skipping {start} line(s) before the {self.dialect.label} header")
        lines = lines[start:]

        header = lines[0]
        grammar, fields = self._match_header(header)

        context = classify_context(
            header, self.dialect, grammar.kind,
            hand_id=fields.get('hand_id'),
            currency_code=fields.get('currency'),
            symbol=fields.get('symbol'),
            big_blind_raw=fields.get('bb'),
        )
        self._context = context

        table_name, max_players, button_seat = self._parse_table(lines)
        seats = self._parse_seats(lines)
        if not seats:
            raise ParseError("No seated players found", code=ErrorCode.PARSE_MALFORMED_SEAT)

        try:
            self._index = PlayerIndex(s.name for s in seats)
        except ValueError as e:
            raise ParseError(str(e), code=ErrorCode.PARSE_DUPLICATE_PLAYER) from e
        self._seat_keys = {s.seat: canonical_key(s.name) for s in seats}

        self._reset()
        self._scan(lines[1:])

        big_blind = self._money(fields['bb'])
        hand = HandHistory(
            hand_id=fields['hand_id'],
            site=self.dialect.site,
            game_type=_game_label(fields.get('game')),
            limit=self.dialect.limit_aliases.get((fields.get("limit") or "").upper(),
                                                 _title(fields.get('limit'))),
            stakes=fields.get('stakes') or '',
            table_name=table_name,
            tournament_id=fields.get('tournament_id'),
            timestamp=(fields.get('timestamp') or '').strip() or None,
            max_players=max_players or max(len(seats), max(s.seat for s in seats)),
            button_seat=button_seat,
            small_blind=self._money(fields['sb']),
            big_blind=big_blind,
            ante=self._ante(fields),
            context=context,
            currency=context.currency_unit,
            players=self._players(seats, button_seat),
            posts=tuple(self._expand_posts(big_blind)),
            preflop=Street(name="preflop", actions=tuple(self._actions["preflop"])),
            flop=self._street("flop"),
            turn=self._street("turn"),
            river=self._street("river"),
            showdown=self._showdown(),
            total_pot=self._total_pot if self._total_pot is not None
            else sum(self._collections.values()) + (self._rake or 0),
            rake=self._rake or 0,
            warnings=context.warnings,
        )
        logger.debug(
            f"Parsed {self.dialect.label} hand {hand.hand_id}: "
            f"{len(hand.players)} players, {len(hand.streets())} streets"
        )
        return hand

    # ------------------------------------------------------------------ #
    # Header / table / seats
    # ------------------------------------------------------------------ #

    def _header_index(self, lines: List[str]) -> int:
        for i, line in enumerate(lines):
            if self.dialect.signature.match(line):
                return i
        raise ParseError(f"No {self.dialect.label} header found",
                         code=ErrorCode.PARSE_MALFORMED_HEADER)

    def _match_header(self, header: str) -> Tuple[HeaderGrammar, Dict[str, str]]:
        # Tournament grammar first: only it carries a level marker
        for grammar in self.dialect.headers:
            m = grammar.pattern.match(header)
            if m:
                return grammar, m.groupdict()
        raise ParseError(
            f"Malformed {self.dialect.label} header: '{header[:120]}'",
            code=ErrorCode.PARSE_MALFORMED_HEADER,
            details={'header': header},
        )

    def _parse_table(self, lines: List[str]) -> Tuple[Optional[str], Optional[int], int]:
        for line in lines[1:]:
            m = self.dialect.table.match(line)
            if m:
                max_players = int(m.group('max')) if m.group('max') else None
                return m.group('table'), max_players, int(m.group('button'))
            if self._marker(line):
                break
        raise ParseError("Missing or malformed table line", code=ErrorCode.PARSE_MALFORMED_TABLE)

    def _parse_seats(self, lines: List[str]) -> List[_Seat]:
        seats: List[_Seat] = []
        for line in lines[1:]:
            if self._marker(line):
                break
            m = self.dialect.seat.match(line)
            if not m:
                continue
            name = _ROLE_SUFFIX.sub('', m.group('name').strip())
            rest = (m.group('rest') or '').lower()
            if 'sitting out' in rest or 'out of hand' in rest:
                status = "sitting-out"
            elif 'disconnected' in rest:
                status = "disconnected"
            else:
                status = "active"
            bounty = self._money(m.group('bounty'), force_cash=True) if m.group('bounty') else None
            seats.append(_Seat(int(m.group('seat')), name, self._money(m.group('stack')),
                               bounty, status))
        return seats

    # ------------------------------------------------------------------ #
    # Body scan
    # ------------------------------------------------------------------ #

    def _reset(self):
        self._posts: List[Tuple[bool, Action]] = []   # (dead blinds?, action)
        self._actions: Dict[str, List[Action]] = {s: [] for s in BETTING_STREETS}
        self._board: Dict[str, Tuple[str, ...]] = {}
        self._hero: Optional[str] = None
        self._known_cards: Dict[str, Tuple[str, ...]] = {}
        self._summary_cards: Dict[str, Tuple[str, ...]] = {}
        self._collections: Dict[str, int] = {}
        self._pot_collections: Dict[int, Dict[str, int]] = {}
        self._winners: List[str] = []
        self._showdown_lines: List[str] = []
        self._showdown_seen = False
        self._total_pot: Optional[int] = None
        self._rake: Optional[int] = None

    def _scan(self, lines: List[str]):
        section = "setup"
        for line in lines:
            marker = self._marker(line)
            if marker:
                section = marker
                if marker in ("flop", "turn", "river"):
                    self._board[marker] = last_bracket_cards(line)
                elif marker == "showdown":
                    self._showdown_seen = True
                continue

            if section == "summary":
                self._summary_line(line)
            elif section == "showdown":
                self._showdown_line(line)
            else:
                street = "preflop" if section == "setup" else section
                self._betting_line(line, street, in_setup=section == "setup")

    def _marker(self, line: str) -> Optional[str]:
        for name, pattern in self.dialect.markers:
            if pattern.match(line):
                return name
        return None

    def _betting_line(self, line: str, street: str, in_setup: bool):
        d = self.dialect

        if in_setup and (d.table.match(line) or d.seat.match(line)):
            return

        for lp in d.posts:
            m = lp.pattern.match(line)
            if m:
                self._posts.append((lp.kind == "dead-blinds", Action(
                    kind="big-blind" if lp.kind == "dead-blinds" else lp.kind,
                    actor=m.group('actor'),
                    key=self._key(m.group('actor')),
                    amount=self._money(m.group('amount')),
                    is_all_in=bool(m.group('allin')),
                )))
                return

        if self._result_line(line):
            return

        m = d.dealt.match(line)
        if m:
            if m.group('cards'):
                key = self._key(m.group('actor'))
                self._known_cards.setdefault(key, parse_cards(m.group('cards')))
                if self._hero is None:
                    self._hero = key
            return

        m = d.uncalled.match(line)
        if m:
            self._actions[street].append(Action(
                kind="uncalled-return", actor=m.group('actor'),
                key=self._key(m.group('actor')), amount=self._money(m.group('amount')),
            ))
            return

        m = d.shows.match(line)
        if m:
            key = self._key(m.group('actor'))
            cards = parse_cards(m.group('cards'))
            self._known_cards.setdefault(key, cards)
            self._actions[street].append(Action(
                kind="shows", actor=m.group('actor'), key=key, cards=cards,
            ))
            return

        for lp in d.actions:
            m = lp.pattern.match(line)
            if m:
                self._actions[street].append(self._action(lp.kind, m, lp.all_in))
                return

        logger.debug(f"[{self.dialect.site}] unmatched line in {street}: {line}")

    def _action(self, kind: str, m: re.Match, all_in: bool) -> Action:
        groups = m.groupdict()
        actor = groups['actor']
        if groups.get('to') is not None:
            raise_by = self._money(groups['raise_by'])
            return Action(kind=kind, actor=actor, key=self._key(actor), amount=raise_by,
                          raise_by=raise_by, total_bet=self._money(groups['to']),
                          is_all_in=all_in)
        amount = self._money(groups['amount']) if groups.get('amount') else 0
        return Action(kind=kind, actor=actor, key=self._key(actor), amount=amount,
                      is_all_in=all_in)

    def _result_line(self, line: str) -> bool:
        """Collections ("X collected N from pot") may appear in any section."""
        for pattern in self.dialect.collected:
            m = pattern.match(line)
            if m:
                key = self._key(m.group('actor'))
                amount = self._money(m.group('amount'))
                self._collections[key] = self._collections.get(key, 0) + amount
                pot_index = _pot_index(m.groupdict())
                if pot_index is not None:
                    bucket = self._pot_collections.setdefault(pot_index, {})
                    bucket[key] = bucket.get(key, 0) + amount
                self._add_winner(m.group('actor'))
                return True
        return False

    def _showdown_line(self, line: str):
        if self._result_line(line):
            return
        d = self.dialect
        m = d.shows.match(line) or d.mucks.match(line)
        if m:
            self._showdown_lines.append(line)
            if m.group('cards'):
                self._known_cards.setdefault(self._key(m.group('actor')), parse_cards(m.group('cards')))
            return
        m = d.uncalled.match(line)
        if m:
            self._actions[self._last_street()].append(Action(
                kind="uncalled-return", actor=m.group('actor'),
                key=self._key(m.group('actor')), amount=self._money(m.group('amount')),
            ))
            return
        logger.debug(f"[{self.dialect.site}] showdown line skipped: {line}")

    def _summary_line(self, line: str):
        d = self.dialect
        m = d.total_pot.match(line)
        if m:
            self._total_pot = self._money(m.group('total'))
            if m.group('rake'):
                self._rake = self._money(m.group('rake'))
            return

        m = d.summary_seat.match(line)
        if m:
            key = self._seat_keys.get(int(m.group('seat')))
            if key is None:
                logger.debug(f"[{self.dialect.site}] summary seat not seated: {line}")
                return
            if m.group('cards'):
                # Earlier reveals win; the summary only fills gaps
                self._summary_cards.setdefault(key, parse_cards(m.group('cards')))
            if m.group('won') or m.group('collected'):
                self._add_winner(key)
            return

        logger.debug(f"[{self.dialect.site}] summary line skipped: {line}")

    def _last_street(self) -> str:
        for street in reversed(BETTING_STREETS):
            if street in self._board:
                return street
        return "preflop"

    # ------------------------------------------------------------------ #
    # Assembly
    # ------------------------------------------------------------------ #

    def _players(self, seats: List[_Seat], button_seat: int) -> Tuple[Player, ...]:
        dealt_in = [s.seat for s in seats if s.status != "sitting-out"]
        positions = assign_positions(dealt_in, button_seat)

        players = []
        for s in sorted(seats, key=lambda x: x.seat):
            key = canonical_key(s.name)
            cards = self._known_cards.get(key) or self._summary_cards.get(key) or ()
            players.append(Player(
                name=s.name, key=key, seat=s.seat, stack=s.stack,
                position=positions.get(s.seat), hole_cards=cards,
                is_hero=key == self._hero, status=s.status, bounty=s.bounty,
            ))
        return tuple(players)

    def _expand_posts(self, big_blind: int) -> List[Action]:
        """Split "posts small & big blinds" into its dead and live parts."""
        posts = []
        for dead_blinds, action in self._posts:
            if dead_blinds:
                dead = action.amount - big_blind
                if dead > 0:
                    posts.append(action.model_copy(update={"kind": "ante", "amount": dead}))
                posts.append(action.model_copy(update={"amount": min(action.amount, big_blind)}))
            else:
                posts.append(action)
        return posts

    def _street(self, name: str) -> Optional[Street]:
        if name not in self._board:
            return None
        cards = self._board[name]
        if name == "flop":
            new_cards = cards
        else:
            # "*** TURN *** [3d Qd 7d] [4d]": the last bracket is the new card
            new_cards = cards[-1:] if cards else ()
        return Street(name=name, cards=new_cards, actions=tuple(self._actions[name]))

    def _showdown(self) -> Optional[Showdown]:
        if not (self._winners or self._showdown_seen):
            return None
        return Showdown(
            info="\n".join(self._showdown_lines),
            winners=tuple(self._winners),
            winner_keys=tuple(canonical_key(w) for w in self._winners),
            pot_won=sum(self._collections.values()),
            collections=dict(self._collections),
            pot_collections={i: dict(c) for i, c in self._pot_collections.items()},
        )

    def _ante(self, fields: Dict[str, str]) -> int:
        if fields.get('ante'):
            return self._money(fields['ante'])
        antes = [a.amount for _, a in self._posts if a.kind == "ante"]
        return max(antes) if antes else 0

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _add_winner(self, name: str):
        key = canonical_key(name)
        if all(canonical_key(w) != key for w in self._winners):
            self._winners.append(self._index.name_of(self._index.index_of(key)))

    def _key(self, name: str) -> str:
        name = name.strip()
        if name not in self._index:
            raise ParseError(
                f"Action by unknown player '{name}'",
                code=ErrorCode.PARSE_UNKNOWN_PLAYER,
                details={'player': name},
            )
        return canonical_key(name)

    def _money(self, raw: str, force_cash: bool = False) -> int:
        context = self._context
        if force_cash and not context.conversion_needed:
            context = GameContext(is_tournament=False, currency_unit="USD", conversion_needed=True)
        return to_minor_units(raw, context)


def _title(value: Optional[str]) -> str:
    return value.title() if value else "No Limit"


def _game_label(value: Optional[str]) -> str:
    if not value or value.lower().startswith('hold'):
        return "Hold'em"
    return value.title()


def _pot_index(groups: Dict[str, Optional[str]]) -> Optional[int]:
    """Pot index of a labelled collection: main pot 0, side pots from 1, unlabelled None."""
    if groups.get('pot') == "main":
        return 0
    if groups.get('pot') == "side":
        return int(groups['pot_no']) if groups.get('pot_no') else 1
    return None
