"""Utterance → intent extraction.

Pure Python, no framework dependencies. Temperature commands are matched
against an ordered rule table; the first rule whose pattern matches decides
the outcome. Navigation and health classification are independent checks
evaluated afterwards.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Pattern, Tuple

from homevoice.domain.models import (
    NO_INTENT,
    Direction,
    HealthQuery,
    Intent,
    Navigate,
    TemperatureChange,
    TemperatureSet,
)

SPELLED_NUMBERS: Dict[str, int] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
}

# Known ASR renderings of "lower it"
MISRECOGNITION_ALIASES: Tuple[str, ...] = (
    "harish",
    "harris",
    "hareesh",
    "lore it",
    "lower at",
    "flower it",
)

DECREASE_KEYWORDS: Tuple[str, ...] = (
    "lower", "lowered", "lowers", "reduce", "reduced", "reduces",
    "decrease", "decreased", "decreases", "drop", "dropped", "drops",
    "turn down", "turned down", "bring down", "down", "cool", "cooler",
    "colder", "cooled",
) + MISRECOGNITION_ALIASES

INCREASE_KEYWORDS: Tuple[str, ...] = (
    "raise", "raised", "raises", "increase", "increased", "increases",
    "boost", "boosted", "boosts", "turn up", "turned up", "warm up",
    "warmed up", "bump up", "warm", "warmer", "warmed", "hotter", "heat up", "up",
)

# Words that can never name a room on their own
ROOM_STOPWORDS = frozenset(
    {
        # command words
        "lower", "lowered", "reduce", "reduced", "decrease", "decreased",
        "drop", "dropped", "turn", "turned", "raise", "raised", "increase",
        "increased", "boost", "boosted", "warm", "warmed", "bring", "set",
        "change", "put", "make", "bump", "crank", "cool", "cooled", "heat",
        "please", "can", "could", "would", "will", "you", "hey", "okay", "ok",
        # filler
        "the", "a", "an", "my", "our", "it", "its", "this", "that", "in",
        "of", "on", "for", "at", "to", "and", "by", "just", "here", "there",
        "now", "me", "us", "some", "little", "bit", "um", "uh", "so", "again",
        "temperature", "temp", "thermostat", "degree", "degrees",
        # polarity
        "up", "down", "higher", "warmer", "cooler", "hotter", "colder",
    }
    | set(SPELLED_NUMBERS)
)

KNOWN_ROOMS: Tuple[str, ...] = (
    "kitchen", "living room", "bedroom", "garage", "laundry", "nursery",
    "outside", "backyard", "master", "entrance", "playroom", "elevator",
    "support", "favorites", "homepage", "home",
)

ROOM_ALIASES: Dict[str, str] = {"homepage": "home", "home page": "home"}

NAV_VERBS: Tuple[str, ...] = (
    "go to", "navigate to", "show me", "take me to", "open", "switch to",
)

# Health talk that must never trigger navigation, even next to a room name
NAV_SKIP_PHRASES: Tuple[str, ...] = (
    "blood pressure", "autonomic dysreflexia", "dysreflexia", "what is",
    "what are", "what's", "symptom", "symptoms", "signs of", "pressure sore",
    "pressure injury", "bladder", "bowel", "catheter", "spasm", "spasms",
    "headache", "emergency", "chest pain", "can't breathe", "how do i",
    "is it normal",
)

HEALTH_VOCABULARY: Tuple[str, ...] = (
    # conditions
    "autonomic dysreflexia", "dysreflexia", "spinal cord injury", "sci",
    "uti", "urinary tract infection", "pressure sore", "pressure injury",
    "pressure ulcer", "spasticity", "hypertension", "hypotension",
    "blood pressure", "infection", "pneumonia", "blood clot", "dvt",
    "depression",
    # body systems
    "bladder", "bowel", "skin", "lungs", "heart", "kidney", "kidneys",
    "circulation", "nervous system",
    # symptoms
    "symptom", "symptoms", "signs", "headache", "sweating", "flushing",
    "nausea", "dizzy", "dizziness", "pain", "numbness", "tingling", "fever",
    "chills", "rash", "spasm", "spasms", "blurred vision",
    # care
    "catheter", "catheterization", "medication", "medicine", "doctor",
    "nurse", "caregiver", "therapy", "wheelchair", "pressure relief",
    "skin check", "hydration",
    # question stems
    "what is", "what are", "what causes", "how do i", "how can i",
    "is it normal", "should i", "why do i", "how to prevent", "tell me about",
    # emergency
    "emergency", "911", "chest pain", "can't breathe", "cannot breathe",
    "unconscious", "stroke", "seizure", "bleeding",
)


def _phrase_re(phrases) -> Pattern:
    ordered = sorted(set(phrases), key=len, reverse=True)
    return re.compile(
        r"(?<![\w'])(?:" + "|".join(re.escape(p) for p in ordered) + r")(?![\w'])",
        re.IGNORECASE,
    )


_DECREASE_RE = _phrase_re(DECREASE_KEYWORDS)
_INCREASE_RE = _phrase_re(INCREASE_KEYWORDS)
_NAV_VERB_RE = _phrase_re(NAV_VERBS)
_NAV_SKIP_RE = _phrase_re(NAV_SKIP_PHRASES)
_HEALTH_RE = _phrase_re(HEALTH_VOCABULARY)
_FORMAL_NAV_RE = re.compile(r"shows\s+the\s+([a-z ]+?)\s+page", re.IGNORECASE)


class DirectionMode(str, Enum):
    """How a rule decides between increase and decrease."""

    FIXED = "fixed"  # rule carries its direction
    CAPTURED = "captured"  # direction keyword inside the captures
    RESCAN = "rescan"  # look for keywords anywhere in the utterance
    GENERIC = "generic"  # policy default for the catch-all rule


@dataclass(frozen=True)
class Rule:
    name: str
    pattern: Pattern
    mode: DirectionMode = DirectionMode.FIXED
    direction: Optional[Direction] = None
    keep_room: bool = True


@dataclass(frozen=True)
class RuleMatch:
    rule: Rule
    room: str
    amount: int
    direction: Optional[Direction]

    @property
    def delta(self) -> int:
        if self.direction is None:
            return 0
        return self.direction.sign * self.amount


@dataclass
class ExtractionPolicy:
    """Heuristic defaults for rules that cannot read a direction from the text."""

    bare_by_direction: Direction = Direction.DECREASE
    generic_by_direction: Direction = Direction.DECREASE
    generic_by_uses_current_page: bool = True
    rooms: Tuple[str, ...] = field(default=KNOWN_ROOMS)


def _rule(name, pattern, mode=DirectionMode.FIXED, direction=None, keep_room=True) -> Rule:
    return Rule(
        name=name,
        pattern=re.compile(pattern, re.IGNORECASE),
        mode=mode,
        direction=direction,
        keep_room=keep_room,
    )


_DEC = r"\b(lower(?:ed)?|reduc(?:e|ed)|decreas(?:e|ed)|drop(?:ped)?|turn(?:ed)? down)"
_INC = r"\b(rais(?:e|ed)|increas(?:e|ed)|boost(?:ed)?|turn(?:ed)? up|warm(?:ed)? up)"
_SPELLED = r"(" + "|".join(SPELLED_NUMBERS) + r")"
# Whole number only: "2.5" is not an amount
_AMOUNT = r"(\d+)\b(?!\.\d)"

# Ordered: the first pattern that matches decides.
TEMPERATURE_RULES: Tuple[Rule, ...] = (
    # 1. explicit decrease with digits
    _rule("decrease_room_temp_by",
          _DEC + r"\s+(?:the\s+)?([a-z ]+?)\s+(?:temperature|temp)\s+by\s+" + _AMOUNT,
          direction=Direction.DECREASE),
    _rule("decrease_by",
          _DEC + r"\s+(?:([a-z ]+?)\s+)?by\s+" + _AMOUNT,
          direction=Direction.DECREASE),
    _rule("turn_room_down_by",
          r"\bturn\s+(?:([a-z ]+?)\s+)?down\s+by\s+" + _AMOUNT,
          direction=Direction.DECREASE),
    # 2. explicit increase with digits
    _rule("increase_room_temp_by",
          _INC + r"\s+(?:the\s+)?([a-z ]+?)\s+(?:temperature|temp)\s+by\s+" + _AMOUNT,
          direction=Direction.INCREASE),
    _rule("increase_by",
          _INC + r"\s+(?:([a-z ]+?)\s+)?by\s+" + _AMOUNT,
          direction=Direction.INCREASE),
    _rule("turn_room_up_by",
          r"\b(?:turn|warm)\s+(?:([a-z ]+?)\s+)?up\s+by\s+" + _AMOUNT,
          direction=Direction.INCREASE),
    # 3. verb and amount split by filler, typically two joined utterances
    _rule("flexible_increase",
          r"\b(raise|increase|boost|turn up|warm up|bump up)\b([\w\s,.'!?-]{0,60}?)\bby\s+" + _AMOUNT,
          direction=Direction.INCREASE),
    # 4. bare "by N degrees"
    _rule("bare_by_degrees",
          r"\bby\s+(\d+)(?!\.\d)\s*(?:degrees?|°)",
          mode=DirectionMode.RESCAN),
    # 5. ASR misrecognitions of "lower it"
    _rule("misheard_lower_it",
          r"\b(" + "|".join(re.escape(a) for a in MISRECOGNITION_ALIASES) + r")\b[\s,]*(?:by\s+)?" + _AMOUNT,
          direction=Direction.DECREASE),
    # 6. catch-all "<word> by N"
    _rule("generic_by",
          r"\b([a-z]+)[\s,.]+by\s+" + _AMOUNT,
          mode=DirectionMode.GENERIC,
          keep_room=False),
    # 7. past tense and spelled-out amounts; past tense with digits is caught by 1 and 2
    _rule("past_tense_by",
          r"\b(lowered|reduced|decreased|dropped|raised|increased|boosted|warmed)\b"
          r"(?:\s+([a-z ]+?))?\s+by\s+" + _SPELLED + r"\b",
          mode=DirectionMode.CAPTURED),
    _rule("spelled_amount_by",
          r"\b(lower|reduce|decrease|drop|raise|increase|boost)\s+(?:([a-z ]+?)\s+)?by\s+" + _SPELLED + r"\b",
          mode=DirectionMode.CAPTURED),
)

_SET_VERBS = r"(?:set|change|put|bring|lower|raise|reduce|increase)"

SETPOINT_RULES: Tuple[Rule, ...] = (
    _rule("set_room_temp_to",
          r"\b" + _SET_VERBS + r"\s+(?:the\s+)?(?:([a-z ]+?)\s+)?(?:temperature|temp|thermostat)\s+to\s+" + _AMOUNT),
    _rule("set_temp_in_room_to",
          r"\b" + _SET_VERBS + r"\s+(?:the\s+)?(?:temperature|temp|thermostat)\s+(?:in|for|of)\s+([a-z ]+?)\s+to\s+" + _AMOUNT),
    _rule("set_room_to_degrees",
          r"\b" + _SET_VERBS + r"\s+(?:the\s+)?([a-z ]+?)\s+to\s+" + _AMOUNT + r"\s*degrees?\b"),
)


def _keyword_direction(token: str) -> Optional[Direction]:
    word = " ".join(token.lower().split())
    if _DECREASE_RE.fullmatch(word):
        return Direction.DECREASE
    if _INCREASE_RE.fullmatch(word):
        return Direction.INCREASE
    return None


def clean_room(candidate: str) -> str:
    """Strip stop words from a captured room phrase; "" when nothing is left."""
    words = [w for w in re.findall(r"[a-z]+", candidate.lower()) if w not in ROOM_STOPWORDS]
    room = " ".join(words)
    return ROOM_ALIASES.get(room, room)


def classify_captures(groups) -> Tuple[Optional[int], Optional[Direction], str]:
    """Sort regex captures into (amount, direction keyword, room candidate)."""
    amount: Optional[int] = None
    direction: Optional[Direction] = None
    room = ""
    for raw in groups:
        if raw is None:
            continue
        captured = raw.strip()
        if not captured:
            continue
        lowered = captured.lower()
        if captured.isdecimal():
            amount = int(captured)
        elif lowered in SPELLED_NUMBERS:
            amount = SPELLED_NUMBERS[lowered]
        elif _keyword_direction(lowered) is not None:
            direction = _keyword_direction(lowered)
        elif not room:
            room = clean_room(captured)
    return amount, direction, room


class IntentExtractor:
    """Deterministic utterance → intent mapping."""

    def __init__(
        self,
        policy: Optional[ExtractionPolicy] = None,
        rules: Tuple[Rule, ...] = TEMPERATURE_RULES,
        setpoint_rules: Tuple[Rule, ...] = SETPOINT_RULES,
    ):
        self.policy = policy or ExtractionPolicy()
        self.rules = rules
        self.setpoint_rules = setpoint_rules
        ordered = sorted(self.policy.rooms, key=len, reverse=True)
        self._room_re = re.compile(
            r"\b(" + "|".join(re.escape(r) for r in ordered) + r")\b",
            re.IGNORECASE,
        )

    def extract(self, text: str) -> Intent:
        """Return at most one intent for a single utterance."""
        if not text or not text.strip():
            return NO_INTENT

        change = self.extract_temperature(text)
        if change is not None:
            return change
        setpoint = self.extract_setpoint(text)
        if setpoint is not None:
            return setpoint
        room = self.extract_navigation(text)
        if room:
            return Navigate(room=room)
        if self.is_health_query(text):
            return HealthQuery(text=text.strip())
        return NO_INTENT

    def match_rule(self, text: str) -> Optional[RuleMatch]:
        """Run the temperature rule table; the first matching rule wins."""
        for rule in self.rules:
            m = rule.pattern.search(text)
            if not m:
                continue
            amount, captured_dir, room = classify_captures(m.groups())
            direction = self._resolve_direction(rule, captured_dir, text)
            keep_room = rule.keep_room or (
                rule.mode is DirectionMode.GENERIC
                and not self.policy.generic_by_uses_current_page
            )
            return RuleMatch(
                rule=rule,
                room=room if keep_room else "",
                amount=amount or 0,
                direction=direction,
            )
        return None

    def extract_temperature(self, text: str) -> Optional[TemperatureChange]:
        match = self.match_rule(text)
        if match is None or match.amount <= 0 or match.direction is None:
            return None
        return TemperatureChange(room=match.room, delta=match.delta)

    def extract_setpoint(self, text: str) -> Optional[TemperatureSet]:
        for rule in self.setpoint_rules:
            m = rule.pattern.search(text)
            if not m:
                continue
            target, _, room = classify_captures(m.groups())
            if target is None or target <= 0:
                return None
            return TemperatureSet(room=room, target=target)
        return None

    def extract_navigation(self, text: str) -> Optional[str]:
        """Room to navigate to, or None."""
        formal = _FORMAL_NAV_RE.search(text)
        if formal:
            room = " ".join(formal.group(1).lower().split())
            return ROOM_ALIASES.get(room, room) or None

        if _NAV_SKIP_RE.search(text):
            return None
        if not _NAV_VERB_RE.search(text):
            return None

        found = [(m.start(), -len(m.group(1)), m.group(1).lower()) for m in self._room_re.finditer(text)]
        if not found:
            return None
        room = min(found)[2]
        return ROOM_ALIASES.get(room, room)

    @staticmethod
    def is_health_query(text: str) -> bool:
        return bool(_HEALTH_RE.search(text))

    def _resolve_direction(
        self, rule: Rule, captured: Optional[Direction], text: str
    ) -> Optional[Direction]:
        if rule.mode is DirectionMode.FIXED:
            return rule.direction
        if captured is not None:
            return captured
        if rule.mode is DirectionMode.RESCAN:
            if _DECREASE_RE.search(text):
                return Direction.DECREASE
            if _INCREASE_RE.search(text):
                return Direction.INCREASE
            return self.policy.bare_by_direction
        if rule.mode is DirectionMode.GENERIC:
            return self.policy.generic_by_direction
        return None


_default_extractor = IntentExtractor()


def extract(text: str) -> Intent:
    """Extract with the default policy."""
    return _default_extractor.extract(text)


def list_rule_names() -> List[str]:
    return [r.name for r in TEMPERATURE_RULES]
