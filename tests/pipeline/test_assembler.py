import pytest

from src.pipeline.assembler import GameAssembler, normalize_whitespace
from src.pipeline.models import AbilityEntry, GameMetadata, LearnsetEntry, PokemonOverride


@pytest.fixture
def game():
    return GameMetadata(
        id="test-rom",
        name_en="Test ROM",
        name_fr="Test ROM",
        base_rom="emerald",
        version="1.0",
        author="Tester",
    )


def _override(key, moves=(), evolution=None):
    return PokemonOverride(
        key=key,
        learnset=[LearnsetEntry(move_key=move, level=level) for move, level in moves],
        abilities=[AbilityEntry(ability_key="overgrow")],
        evolution_method=evolution,
    )


@pytest.mark.parametrize(
    "text, expected",
    [("  Route\n 101  ", "Route 101"), ("a\t\tb", "a b"), ("", ""), (None, "")],
)
def test_normalize_whitespace(text, expected):
    assert normalize_whitespace(text) == expected


# ---------------------------------------------------------------------------
# Pokémon
# ---------------------------------------------------------------------------


def test_every_encounter_key_appears_in_output(game):
    assembler = GameAssembler(game)
    assembler.add_learnsets([_override("bulbasaur", [("tackle", 1)])])
    assembler.add_pokemon_locations({
        "bulbasaur": ["Route 1 [Kanto]"],
        "zubat": ["Mt. Moon [Kanto]"],
    })

    dataset = assembler.build()
    by_key = {override.key: override for override in dataset.pokemon_overrides}

    assert [override.key for override in dataset.pokemon_overrides] == ["bulbasaur", "zubat"]
    assert by_key["bulbasaur"].learnset == [LearnsetEntry("tackle", 1)]
    assert by_key["bulbasaur"].locations == ["Route 1 [Kanto]"]
    assert by_key["zubat"].learnset == []
    assert by_key["zubat"].abilities == []
    assert by_key["zubat"].locations == ["Mt. Moon [Kanto]"]


def test_location_maps_are_unioned_without_duplicates(game):
    assembler = GameAssembler(game)
    assembler.add_pokemon_locations({"zubat": ["Mt. Moon [Kanto]"]})
    assembler.add_pokemon_locations({"zubat": ["Mt. Moon  [Kanto]", "Rock Tunnel [Kanto]"], "x": ["Nowhere"]})

    (zubat,) = assembler.build().pokemon_overrides
    assert zubat.locations == ["Mt. Moon [Kanto]", "Rock Tunnel [Kanto]"]


def test_repeated_learnset_blocks_merge(game):
    assembler = GameAssembler(game)
    added = assembler.add_learnsets([
        _override("eevee", [("tackle", 1)], evolution="with a Water Stone"),
        _override("eevee", [("bite", 20)], evolution="with a Fire Stone"),
    ])

    assert added == 1
    (eevee,) = assembler.build().pokemon_overrides
    assert [entry.move_key for entry in eevee.learnset] == ["tackle", "bite"]
    assert len(eevee.abilities) == 2
    assert eevee.evolution_method == "with a Water Stone"


def test_merge_does_not_mutate_input_records(game):
    original = _override("eevee", [("tackle", 1)])
    assembler = GameAssembler(game)
    assembler.add_learnsets([original, _override("eevee", [("bite", 20)])])

    assert [entry.move_key for entry in original.learnset] == ["tackle"]


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


def test_item_locations_deduplicate_after_whitespace_normalisation(game):
    assembler = GameAssembler(game)

    assert assembler.add_item_location("potion", "Petalburg  Mart") is True
    assert assembler.add_item_location("potion", "Petalburg Mart\n") is False
    assert assembler.add_item_location("potion", "Route 102") is True

    (potion,) = assembler.build().item_locations
    assert potion.locations == ["Petalburg Mart", "Route 102"]


@pytest.mark.parametrize("key, location", [("p", "Route 1"), ("potion", "R1"), ("", "Route 1"), ("potion", "   ")])
def test_noise_is_rejected(game, key, location):
    assembler = GameAssembler(game)
    assert assembler.add_item_location(key, location) is False
    assert assembler.build().item_locations == []


def test_add_item_locations_counts_appended_pairs(game):
    assembler = GameAssembler(game)
    count = assembler.add_item_locations([
        ("leftovers", "Route 111"),
        ("leftovers", "Route 111"),
        ("x", "Route 111"),
        ("oran-berry", "Route 102"),
    ])

    assert count == 2
    assert [record.key for record in assembler.build().item_locations] == ["leftovers", "oran-berry"]


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def test_build_is_repeatable(game):
    assembler = GameAssembler(game)
    assembler.add_learnsets([_override("bulbasaur", [("tackle", 1)])])
    assembler.add_pokemon_locations({"bulbasaur": ["Route 1 [Kanto]"], "zubat": ["Mt. Moon [Kanto]"]})

    assert assembler.build().to_dict() == assembler.build().to_dict()


def test_dataset_wire_format(game):
    assembler = GameAssembler(game)
    assembler.add_learnsets([_override("bulbasaur", [("tackle", 1)], evolution="at level 16")])
    assembler.add_item_location("potion", "Route 1")

    data = assembler.build().to_dict()

    assert data["game"]["id"] == "test-rom"
    assert data["game"]["is_hackrom"] is True
    assert data["move_overrides"] == []
    assert data["pokemon_overrides"] == [{
        "name_key": "bulbasaur",
        "learnset": [{"move_name_key": "tackle", "learn_method": "level-up", "level": 1}],
        "abilities": [{"ability_key": "overgrow", "slot": 1, "is_hidden": False}],
        "evolution_method": "at level 16",
    }]
    assert data["item_locations"] == [{"name_key": "potion", "locations": ["Route 1"]}]


def test_invalid_coverage_is_rejected():
    with pytest.raises(ValueError):
        GameMetadata(
            id="x", name_en="X", name_fr="X", base_rom="emerald", version="1", author="a",
            coverage="partial",
        )
