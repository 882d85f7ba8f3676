"""
Per-dialect pattern tables.

Each supported site is described purely as data: header grammars (tournament
and cash form), section markers, and the ordered line patterns for posts,
actions and results. The single engine in engine.py consumes these tables.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Pattern, Tuple

_AMT = r'(?P<amount>[$€£]?[\d][\d,.]*)'
_ACTOR = r'^(?P<actor>.+?):'


@dataclass(frozen=True)
class HeaderGrammar:
    """One alternative form of the first line of a hand."""
    kind: str                   # "tournament" | "cash"
    pattern: Pattern


@dataclass(frozen=True)
class LinePattern:
    """An action line: the action kind it produces and its regex."""
    kind: str
    pattern: Pattern
    all_in: bool = False


@dataclass(frozen=True)
class Dialect:
    site: str
    label: str
    signature: Pattern
    headers: Tuple[HeaderGrammar, ...]
    markers: Tuple[Tuple[str, Pattern], ...]
    limit_aliases: Dict[str, str] = field(default_factory=dict)
    tournament_id_prefix: Optional[str] = None

    # Shared body grammar; overridable per site
    table: Pattern = None
    seat: Pattern = None
    posts: Tuple[LinePattern, ...] = ()
    actions: Tuple[LinePattern, ...] = ()
    uncalled: Pattern = None
    collected: Tuple[Pattern, ...] = ()
    shows: Pattern = None
    mucks: Pattern = None
    dealt: Pattern = None
    total_pot: Pattern = None
    summary_seat: Pattern = None


def _c(pattern: str) -> Pattern:
    return re.compile(pattern, re.IGNORECASE)


TABLE = _c(r"^Table '(?P<table>[^']*)'\s+(?:(?P<max>\d+)-max\s+)?(?:\([^)]*\)\s+)?"
           r"Seat #(?P<button>\d+) is the button")

SEAT = _c(r'^Seat (?P<seat>\d+): (?P<name>.+?) \((?P<stack>[^()]*?) in chips'
          r'(?:, (?P<bounty>[^()]*?) bounty)?\)(?P<rest>.*)$')

POSTS = (
    LinePattern("dead-blinds", _c(_ACTOR + r' posts small & big blinds ' + _AMT + r'(?P<allin> and is all-in)?$')),
    LinePattern("ante", _c(_ACTOR + r' posts (?:the )?ante ' + _AMT + r'(?P<allin> and is all-in)?$')),
    LinePattern("small-blind", _c(_ACTOR + r' posts small blind ' + _AMT + r'(?P<allin> and is all-in)?$')),
    LinePattern("big-blind", _c(_ACTOR + r' posts big blind ' + _AMT + r'(?P<allin> and is all-in)?$')),
)

# Order matters: the capped all-in raise must win over the generic raise
ACTIONS = (
    LinePattern("all-in", _c(_ACTOR + r' raises (?P<raise_by>\S+) to (?P<to>\S+) and is all-in$'), all_in=True),
    LinePattern("raise", _c(_ACTOR + r' raises (?P<raise_by>\S+) to (?P<to>\S+)$')),
    LinePattern("all-in", _c(_ACTOR + r' bets ' + _AMT + r' and is all-in$'), all_in=True),
    LinePattern("all-in", _c(_ACTOR + r' calls ' + _AMT + r' and is all-in$'), all_in=True),
    LinePattern("bet", _c(_ACTOR + r' bets ' + _AMT + r'$')),
    LinePattern("call", _c(_ACTOR + r' calls ' + _AMT + r'$')),
    LinePattern("check", _c(_ACTOR + r' checks$')),
    LinePattern("fold", _c(_ACTOR + r' folds(?: \[[^\]]*\])?$')),
)

UNCALLED = _c(r'^Uncalled bet \((?P<amount>[^)]+)\) returned to (?P<actor>.+)$')

COLLECTED = (
    _c(r'^(?P<actor>.+?) collected ' + _AMT + r' from (?:(?P<pot>main|side) )?pot(?:-(?P<pot_no>\d+))?$'),
    _c(r'^(?P<actor>.+?) wins ' + _AMT + r'(?: with .*)?$'),
)

SHOWS = _c(_ACTOR + r' shows \[(?P<cards>[^\]]+)\]')
MUCKS = _c(_ACTOR + r' mucks hand(?: \[(?P<cards>[^\]]+)\])?')
DEALT = _c(r'^Dealt to (?P<actor>.+?)(?: \[(?P<cards>[^\]]+)\])?$')

TOTAL_POT = _c(r'^Total pot (?P<total>\S+)(?:.*?\|\s*Rake (?P<rake>[^\s|]+))?')

SUMMARY_SEAT = _c(r'^Seat (?P<seat>\d+): (?P<actor>.+?)(?: \((?:button|small blind|big blind|all-in)\))*'
                  r' (?:(?P<what>showed|mucked) \[(?P<cards>[^\]]+)\](?: and won \((?P<won>[^)]+)\))?'
                  r'|collected \((?P<collected>[^)]+)\))')


def _markers(showdown: str) -> Tuple[Tuple[str, Pattern], ...]:
    return (
        ("preflop", _c(r'^\*\*\* HOLE CARDS \*\*\*')),
        ("flop", _c(r'^\*\*\* FLOP \*\*\*')),
        ("turn", _c(r'^\*\*\* TURN \*\*\*')),
        ("river", _c(r'^\*\*\* RIVER \*\*\*')),
        ("showdown", _c(showdown)),
        ("summary", _c(r'^\*\*\* SUMMARY \*\*\*')),
    )


_BODY = dict(
    table=TABLE, seat=SEAT, posts=POSTS, actions=ACTIONS, uncalled=UNCALLED,
    collected=COLLECTED, shows=SHOWS, mucks=MUCKS, dealt=DEALT,
    total_pot=TOTAL_POT, summary_seat=SUMMARY_SEAT,
)

_GAME = r"(?P<game>Hold'?em|Omaha)"
_LIMIT = r'(?P<limit>No Limit|Pot Limit|Fixed Limit|Limit)'
_STAKES = (r'(?P<stakes>(?P<symbol>[$€£])?(?P<sb>[\d,.]+)/[$€£]?(?P<bb>[\d,.]+)'
           r'(?:\s+(?P<currency>USD|EUR|GBP))?)')
_DATE = r'(?:\s*-\s*(?P<timestamp>.+))?$'


POKERSTARS = Dialect(
    site="pokerstars",
    label="PokerStars",
    signature=re.compile(r'^PokerStars (?:Zoom )?(?:Hand|Game) #\d+:', re.MULTILINE),
    headers=(
        HeaderGrammar("tournament", _c(
            r'^PokerStars (?:Zoom )?(?:Hand|Game) #(?P<hand_id>\d+):\s+'
            r'Tournament #(?P<tournament_id>\d+),?\s+(?P<buyin>.*?)\s*' + _GAME + r'\s+' + _LIMIT +
            r'\s+-\s+(?:Match Round \w+,\s+)?Level (?P<level>[IVXLCDM\d]+)\s*'
            r'\((?P<stakes>(?P<sb>[\d,.]+)/(?P<bb>[\d,.]+))\)' + _DATE)),
        HeaderGrammar("cash", _c(
            r'^PokerStars (?:Zoom )?(?:Hand|Game) #(?P<hand_id>\d+):\s+' + _GAME + r'\s+' + _LIMIT +
            r'\s+\(' + _STAKES + r'\)' + _DATE)),
    ),
    markers=_markers(r'^\*\*\* SHOW ?DOWN \*\*\*'),
    **_BODY,
)

GGPOKER = Dialect(
    site="ggpoker",
    label="GGPoker",
    signature=re.compile(r'^(?:GG)?Poker Hand #\w+:', re.MULTILINE),
    headers=(
        HeaderGrammar("tournament", _c(
            r'^(?:GG)?Poker Hand #(?P<hand_id>\w+):\s+'
            r'Tournament #(?P<tournament_id>\d+),\s*(?P<buyin>.*?)\s*' + _GAME + r'\s+' + _LIMIT +
            r'\s*-\s*Level\s*(?P<level>\d+)\s*'
            r'\((?P<stakes>(?P<sb>[\d,.]+)/(?P<bb>[\d,.]+))(?:\((?P<ante>[\d,.]+)\))?\)' + _DATE)),
        HeaderGrammar("cash", _c(
            r'^(?:GG)?Poker Hand #(?P<hand_id>\w+):\s+' + _GAME + r'\s+' + _LIMIT +
            r'\s+\(' + _STAKES + r'\)' + _DATE)),
    ),
    markers=_markers(r'^\*\*\* SHOW ?DOWN \*\*\*'),
    tournament_id_prefix="TM",
    **_BODY,
)

PARTYPOKER = Dialect(
    site="partypoker",
    label="PartyPoker",
    signature=re.compile(r'^PartyPoker Hand #\d+:', re.MULTILINE),
    headers=(
        HeaderGrammar("tournament", _c(
            r'^PartyPoker Hand #(?P<hand_id>\d+):\s+'
            r'Tournament #(?P<tournament_id>\d+),\s*(?P<buyin>.*?)\s*(?P<limit>NL|PL|FL)\s+' + _GAME +
            r'\s*-\s*Level (?P<level>[IVXLCDM\d]+)\s*'
            r'\((?P<stakes>(?P<sb>[\d,.]+)/(?P<bb>[\d,.]+))\)' + _DATE)),
        HeaderGrammar("cash", _c(
            r'^PartyPoker Hand #(?P<hand_id>\d+):\s+(?P<limit>NL|PL|FL)\s+' + _GAME +
            r'\s+\(' + _STAKES + r'\)' + _DATE)),
    ),
    markers=_markers(r'^\*\*\* SHOW ?DOWN \*\*\*'),
    limit_aliases={"NL": "No Limit", "PL": "Pot Limit", "FL": "Fixed Limit"},
    **_BODY,
)

DIALECTS: Tuple[Dialect, ...] = (POKERSTARS, GGPOKER, PARTYPOKER)

# Vendors we recognise but cannot parse
UNSUPPORTED_SIGNATURES: Tuple[Tuple[str, Pattern], ...] = (
    ("Winamax", re.compile(r'^Winamax Poker\s*-', re.MULTILINE)),
    ("888poker", re.compile(r'^(?:\*+\s*)?888(?:poker|\.pt)\s+Hand', re.MULTILINE | re.IGNORECASE)),
    ("WPN/ACR", re.compile(r'^Game Hand #\d+', re.MULTILINE)),
    ("iPoker", re.compile(r'^GAME #\d+:', re.MULTILINE)),
)
