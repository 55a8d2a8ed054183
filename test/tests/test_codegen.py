import pytest

from codegen import (
    Category, CodeGenerator, GenerationExhausted, LookupFailure, RandomCandidates,
    SequentialCandidates, TARGETS, UnknownCategory, build_generator, resolve_target,
)
from lookup import MemoryRecordLookup


class AlwaysTaken:
    def __init__(self):
        self.calls = 0

    def exists(self, category, field_name, candidate):
        self.calls += 1
        return True


def fixed(*codes):
    return lambda target: iter(codes)


def test_printer_scenario_skips_taken_codes():
    lookup = MemoryRecordLookup({("printer", "printerCode"): {"PRN001", "PRN002"}})
    gen = CodeGenerator(lookup, max_attempts=5, candidates=fixed("PRN001", "PRN002", "PRN003"))

    assert gen.generate("printer", "printerCode") == "PRN003"
    assert [c[2] for c in lookup.calls] == ["PRN001", "PRN002", "PRN003"]


def test_first_free_candidate_returned_after_one_lookup():
    lookup = MemoryRecordLookup()
    gen = CodeGenerator(lookup, candidates=fixed("PZ001", "PZ002"))

    assert gen.generate(Category.PREP_ZONE, "prepZoneCode") == "PZ001"
    assert len(lookup.calls) == 1


def test_exhausted_when_every_candidate_taken():
    lookup = AlwaysTaken()
    gen = CodeGenerator(lookup, max_attempts=7)

    with pytest.raises(GenerationExhausted) as exc:
        gen.generate("printer", "printerCode")
    assert lookup.calls == 7
    assert exc.value.attempts == 7
    assert exc.value.category is Category.PRINTER
    assert exc.value.field_name == "printerCode"


def test_exhausted_when_candidate_source_runs_dry():
    lookup = MemoryRecordLookup({("tax", "taxCode"): {"TX001"}})
    gen = CodeGenerator(lookup, max_attempts=5, candidates=fixed("TX001"))

    with pytest.raises(GenerationExhausted) as exc:
        gen.generate("tax", "taxCode")
    assert exc.value.attempts == 1


@pytest.mark.parametrize("category, field", [
    ("printers", "printerCode"),
    ("", "printerCode"),
    ("printer", "prepZoneCode"),
    (Category.MENU_MASTER, "menuCode"),
])
def test_unknown_category_fails_without_lookup(category, field):
    lookup = MemoryRecordLookup()
    gen = CodeGenerator(lookup)

    with pytest.raises(UnknownCategory):
        gen.generate(category, field)
    assert lookup.calls == []


def test_lookup_error_surfaces_as_lookup_failure():
    lookup = MemoryRecordLookup()
    lookup.error = ConnectionError("db down")
    gen = CodeGenerator(lookup, candidates=fixed("MG001"))

    with pytest.raises(LookupFailure) as exc:
        gen.generate("modifierGroup", "modifierGroupCode")
    assert isinstance(exc.value.__cause__, ConnectionError)
    assert exc.value.attempts == 1
    assert exc.value.to_dict()["category"] == "modifierGroup"


def test_sequential_source_failure_is_lookup_failure():
    lookup = MemoryRecordLookup()
    lookup.error = TimeoutError("slow")
    gen = CodeGenerator(lookup, candidates=SequentialCandidates(lookup))

    with pytest.raises(LookupFailure):
        gen.generate("printer", "printerCode")


@pytest.mark.parametrize("strategy", ["sequential", "random"])
def test_codes_unique_against_fixed_store(strategy):
    stored = {"MI001", "MI004"}
    lookup = MemoryRecordLookup({("menuItem", "menuItemCode"): stored})
    gen = build_generator({"CODE_STRATEGY": strategy, "CODE_MAX_ATTEMPTS": 10, "CODE_RANDOM_LENGTH": 8}, lookup)

    codes = [gen.generate("menuItem", "menuItemCode") for _ in range(50)]
    assert len(set(codes)) == 50
    assert not set(codes) & stored
    # the store was only read
    assert lookup.codes[(Category.MENU_ITEM, "menuItemCode")] == stored


def test_sequential_does_not_repeat_before_insert():
    gen = build_generator({"CODE_STRATEGY": "sequential"}, MemoryRecordLookup())

    codes = [gen.generate("printer", "printerCode") for _ in range(3)]
    assert codes == ["PRN001", "PRN002", "PRN003"]


def test_sequential_follows_store_past_issued_numbers():
    lookup = MemoryRecordLookup()
    gen = build_generator({"CODE_STRATEGY": "sequential"}, lookup)

    assert gen.generate("tax", "taxCode") == "TX001"
    lookup.add("tax", "taxCode", "TX007")
    assert gen.generate("tax", "taxCode") == "TX008"
    # other categories keep their own counter
    assert gen.generate("printer", "printerCode") == "PRN001"


def test_memory_lookup_reads_do_not_create_keys():
    lookup = MemoryRecordLookup()
    assert not lookup.exists("printer", "printerCode", "PRN001")
    assert lookup.latest("printer", "printerCode", "PRN") is None
    assert lookup.codes == {}


def test_sequential_continues_after_highest_code():
    lookup = MemoryRecordLookup({("printer", "printerCode"): {"PRN001", "PRN009", "PRN010", "W001"}})
    gen = CodeGenerator(lookup, candidates=SequentialCandidates(lookup))

    assert gen.generate("printer", "printerCode") == "PRN011"


def test_sequential_starts_at_one():
    lookup = MemoryRecordLookup()
    gen = CodeGenerator(lookup, candidates=SequentialCandidates(lookup))

    assert gen.generate("availability", "avaiCode") == "AV001"


def test_random_candidates_shape():
    target = TARGETS[Category.PREP_STATION]
    source = RandomCandidates(length=6)(target)
    for _ in range(20):
        code = next(source)
        assert code.startswith("PS")
        assert len(code) == 8
        assert code.isupper()
        assert not set(code[2:]) & set("01OI")


def test_every_category_has_a_target():
    for category in Category:
        assert resolve_target(category.value, TARGETS[category].field_name).category is category


def test_bad_max_attempts_rejected():
    with pytest.raises(ValueError):
        CodeGenerator(MemoryRecordLookup(), max_attempts=0)


def test_build_generator_from_config():
    lookup = MemoryRecordLookup()
    gen = build_generator({"CODE_STRATEGY": "random", "CODE_MAX_ATTEMPTS": "9", "CODE_RANDOM_LENGTH": 5}, lookup)
    assert gen.max_attempts == 9
    assert len(gen.generate("tax", "taxCode")) == len("TX") + 5

    with pytest.raises(ValueError):
        build_generator({"CODE_STRATEGY": "uuid"}, lookup)


def test_targets_cover_every_category():
    assert set(TARGETS) == set(Category)
    assert len({t.prefix for t in TARGETS.values()}) == len(Category)
