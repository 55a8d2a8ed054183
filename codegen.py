"""
Project: Restaurant POS Admin Backend
Date: October 2026

Description:
Unique code generation for coded POS entities (printers, prep zones,
menu masters, modifier groups, ...). A code is a short uppercase string such
as PRN001 that must be unique per entity category. The generator only proves
a candidate is free at check time; the caller inserts the row and retries on
a unique-constraint violation.
"""

import enum
import logging
import secrets
import threading
from collections import namedtuple

logger = logging.getLogger(__name__)


class Category(enum.Enum):
    AVAILABILITY = "availability"
    MENU_MASTER = "menuMaster"
    MENU_CATEGORY = "menuCategory"
    MENU_ITEM = "menuItem"
    PREP_ZONE = "prepZone"
    PREP_STATION = "prepStation"
    PRINTER = "printer"
    TAX = "tax"
    MODIFIER_GROUP = "modifierGroup"
    MODIFIER_ITEM = "modifierItem"


CodeTarget = namedtuple("CodeTarget", ["category", "field_name", "prefix", "width"])

TARGETS = {
    t.category: t
    for t in (
        CodeTarget(Category.AVAILABILITY, "avaiCode", "AV", 3),
        CodeTarget(Category.MENU_MASTER, "menuMasterCode", "MM", 3),
        CodeTarget(Category.MENU_CATEGORY, "menuCategoryCode", "MC", 3),
        CodeTarget(Category.MENU_ITEM, "menuItemCode", "MI", 3),
        CodeTarget(Category.PREP_ZONE, "prepZoneCode", "PZ", 3),
        CodeTarget(Category.PREP_STATION, "prepStationCode", "PS", 3),
        CodeTarget(Category.PRINTER, "printerCode", "PRN", 3),
        CodeTarget(Category.TAX, "taxCode", "TX", 3),
        CodeTarget(Category.MODIFIER_GROUP, "modifierGroupCode", "MG", 3),
        CodeTarget(Category.MODIFIER_ITEM, "modifierItemCode", "MD", 3),
    )
}

_unbound = set(Category) - set(TARGETS)
if _unbound:
    raise RuntimeError(f"code categories without a target: {sorted(c.value for c in _unbound)}")


# ---------- errors ----------
class CodeGenerationError(Exception):
    kind = "code_generation_error"

    def __init__(self, message, category=None, field_name=None, attempts=0):
        super().__init__(message)
        self.category = category
        self.field_name = field_name
        self.attempts = attempts

    def to_dict(self):
        category = self.category.value if isinstance(self.category, Category) else self.category
        return {
            "error": self.kind,
            "message": str(self),
            "category": category,
            "field": self.field_name,
            "attempts": self.attempts,
        }


class UnknownCategory(CodeGenerationError):
    kind = "unknown_category"


class GenerationExhausted(CodeGenerationError):
    kind = "generation_exhausted"


class LookupFailure(CodeGenerationError):
    kind = "lookup_failure"


def resolve_target(category, field_name):
    """Return the CodeTarget for (category, field_name) or raise UnknownCategory."""
    try:
        cat = category if isinstance(category, Category) else Category(category)
    except ValueError:
        raise UnknownCategory(
            f"unknown code category {category!r}", category=category, field_name=field_name
        ) from None
    target = TARGETS[cat]
    if target.field_name != field_name:
        raise UnknownCategory(
            f"{cat.value} codes live in {target.field_name!r}, not {field_name!r}",
            category=cat,
            field_name=field_name,
        )
    return target


# ---------- candidate sources ----------
class RandomCandidates:
    """Prefix plus random characters, skipping look-alike glyphs (0/O, 1/I)."""

    ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"

    def __init__(self, length=4):
        if length < 1:
            raise ValueError("length must be >= 1")
        self.length = length

    def __call__(self, target):
        while True:
            yield target.prefix + "".join(secrets.choice(self.ALPHABET) for _ in range(self.length))


class SequentialCandidates:
    """
    Next number after the highest stored code with the target's prefix,
    zero padded to the target width (PRN001, PRN002, ...). Each collision
    steps the counter by one.

    Numbers handed out are remembered per target, so repeated calls against
    a store that has not caught up yet never repeat a code.
    """

    def __init__(self, lookup):
        self.lookup = lookup
        self._issued = {}
        self._lock = threading.Lock()

    def _last_number(self, target):
        last = self.lookup.latest(target.category, target.field_name, target.prefix)
        if not last:
            return 0
        digits = last[len(target.prefix):]
        return int(digits) if digits.isdigit() else 0

    def _claim(self, target, floor):
        with self._lock:
            n = max(floor, self._issued.get(target.category, 0)) + 1
            self._issued[target.category] = n
        return n

    def __call__(self, target):
        n = self._last_number(target)
        while True:
            n = self._claim(target, n)
            yield f"{target.prefix}{n:0{target.width}d}"


# ---------- generator ----------
class CodeGenerator:
    """
    Produces codes that are free at check time for a (category, field) pair.

    `lookup` must provide exists(category, field_name, candidate) -> bool.
    `candidates` is a callable taking a CodeTarget and returning an iterable
    of candidate strings; defaults to RandomCandidates().
    """

    def __init__(self, lookup, max_attempts=5, candidates=None):
        if not isinstance(max_attempts, int) or max_attempts < 1:
            raise ValueError("max_attempts must be a positive integer")
        self.lookup = lookup
        self.max_attempts = max_attempts
        self.candidates = candidates or RandomCandidates()

    def generate(self, category, field_name):
        target = resolve_target(category, field_name)
        cat = target.category

        attempts = 0
        try:
            source = iter(self.candidates(target))
        except Exception as exc:
            raise LookupFailure(
                f"could not start candidate source for {cat.value}.{field_name}: {exc}",
                category=cat, field_name=field_name, attempts=attempts,
            ) from exc

        while attempts < self.max_attempts:
            try:
                candidate = next(source)
            except StopIteration:
                break
            except Exception as exc:
                raise LookupFailure(
                    f"candidate source failed for {cat.value}.{field_name}: {exc}",
                    category=cat, field_name=field_name, attempts=attempts,
                ) from exc

            attempts += 1
            try:
                taken = self.lookup.exists(cat, field_name, candidate)
            except Exception as exc:
                logger.warning("code lookup failed for %s.%s (attempt %d): %s",
                               cat.value, field_name, attempts, exc)
                raise LookupFailure(
                    f"lookup failed for {cat.value}.{field_name}={candidate!r}: {exc}",
                    category=cat, field_name=field_name, attempts=attempts,
                ) from exc

            if not taken:
                return candidate
            logger.debug("code %s already used for %s.%s", candidate, cat.value, field_name)

        logger.warning("no free %s.%s code after %d attempts", cat.value, field_name, attempts)
        raise GenerationExhausted(
            f"no free code for {cat.value}.{field_name} after {attempts} attempts",
            category=cat, field_name=field_name, attempts=attempts,
        )


def build_generator(config, lookup):
    """Create a CodeGenerator from a Flask config mapping."""
    strategy = config.get("CODE_STRATEGY", "sequential")
    if strategy == "sequential":
        candidates = SequentialCandidates(lookup)
    elif strategy == "random":
        candidates = RandomCandidates(int(config.get("CODE_RANDOM_LENGTH", 4)))
    else:
        raise ValueError(f"unknown CODE_STRATEGY {strategy!r}")
    return CodeGenerator(lookup, max_attempts=int(config.get("CODE_MAX_ATTEMPTS", 5)),
                         candidates=candidates)
