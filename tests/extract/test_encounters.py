import pytest

from src.extract.encounters import (
    FAMILY_HEADER_FIRST,
    FAMILY_ROUTE_ROW,
    NON_ROUTE_LABEL,
    detect_pokemon_columns,
    extract_header_first,
    extract_route_row,
    find_labelled_pokemon_columns,
    find_route_row,
    forward_fill_routes,
    looks_like_species,
    merge_location_maps,
    parse_encounter_workbook,
    score_candidate_row,
)


# Family A: route names on row 0, column labels on row 1
HOENN_SHEET = [
    ["Route 101", "", "", "Petalburg Woods", "", ""],
    ["Level", "Pokémon", "Caught", "Level", "Pokemon", "Caught"],
    ["2", "Zigzagoon", "", "5", "Shroomish", ""],
    ["3", "Wurmple", "", "5", "Zigzagoon", ""],
    ["3", "Zigzagoon", "", "", "#N/A", ""],
]

# Family A without any "Pokémon" label
UNLABELLED_SHEET = [
    ["Route 102", "", "Route 103", ""],
    ["Lv", "Mon", "Lv", "Mon"],
    ["4", "Ralts", "10", "Wingull"],
    ["5", "Lotad", "12", "N/A"],
]

# Family B: a title banner, then the route row, then labels
KANTO_SHEET = [
    ["RADICAL RED ENCOUNTERS", "", "", "", "", ""],
    ["", "", "", "", "", ""],
    ["Route 1", "", "Viridian Forest", "", "Mt. Moon", ""],
    ["Pokémon", "Level", "Pokemon", "Level", "POKÉMON", "Level"],
    ["Pidgey", "2-4", "Caterpie", "3", "Zubat", "7"],
    ["Rattata", "2", "Pikachu", "5", "Clefairy", "8"],
]


# ---------------------------------------------------------------------------
# Row scoring and route detection
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "row, expected",
    [
        (["Route 1", "Cerulean City", "Rock Tunnel", "Lv", ""], 3),
        (["Mt. Moon", "Safari Zone", "", ""], 2),
        (["Mt.", "Level", "Pokémon"], 0),
        ([], 0),
    ],
)
def test_score_candidate_row(row, expected):
    assert score_candidate_row(row) == expected


def test_find_route_row_skips_banner_rows():
    assert find_route_row(KANTO_SHEET) == 2


def test_find_route_row_only_scans_top_rows():
    rows = [[""]] * 5 + [["Route 1", "Route 2", "Route 3"]]
    assert find_route_row(rows) is None
    assert find_route_row(rows, depth=6) == 5


def test_forward_fill_routes_carries_last_label_right():
    assert forward_fill_routes(["Route 101", "", "", "Petalburg Woods", ""]) == [
        "Route 101", "Route 101", "Route 101", "Petalburg Woods", "Petalburg Woods",
    ]


def test_forward_fill_routes_ignores_column_labels_in_stoplist():
    row = ["Route 1", "Level", "Viridian Forest", "Surfing", "Mt. Moon", "Caught"]
    routes = forward_fill_routes(row, min_length=3, stoplist=NON_ROUTE_LABEL)
    assert routes == ["Route 1", "Route 1", "Viridian Forest", "Viridian Forest", "Mt. Moon", "Mt. Moon"]


def test_forward_fill_routes_strips_control_characters():
    assert forward_fill_routes(["\tRoute 5\r", "x"]) == ["Route 5", "Route 5"]


# ---------------------------------------------------------------------------
# Pokémon column detection
# ---------------------------------------------------------------------------


def test_labelled_columns_match_accented_and_plain_spellings():
    assert find_labelled_pokemon_columns(HOENN_SHEET, [1]) == [1, 4]


def test_exact_label_match_rejects_longer_headers():
    rows = [["Pokémon", "Pokémon Level", "pokemon"]]
    assert find_labelled_pokemon_columns(rows, [0], exact=True) == [0, 2]
    assert find_labelled_pokemon_columns(rows, [0]) == [0, 1, 2]


def test_fallback_detection_skips_first_column_and_numbers():
    assert detect_pokemon_columns(UNLABELLED_SHEET) == [1, 3]


@pytest.mark.parametrize(
    "value, expected",
    [("Zigzagoon", True), ("Mr. Mime", True), ("12", False), ("ZUBAT", False), ("Lv", False), ("", False)],
)
def test_looks_like_species(value, expected):
    assert looks_like_species(value) is expected


# ---------------------------------------------------------------------------
# Family A
# ---------------------------------------------------------------------------


def test_header_first_tags_species_with_route_and_sheet():
    location_map = {}
    extract_header_first("Hoenn", HOENN_SHEET, location_map)

    assert location_map == {
        "zigzagoon": ["Route 101 [Hoenn]", "Petalburg Woods [Hoenn]"],
        "shroomish": ["Petalburg Woods [Hoenn]"],
        "wurmple": ["Route 101 [Hoenn]"],
    }


def test_header_first_falls_back_to_capitalised_columns():
    location_map = {}
    extract_header_first("Hoenn", UNLABELLED_SHEET, location_map)

    assert location_map == {
        "ralts": ["Route 102 [Hoenn]"],
        "wingull": ["Route 103 [Hoenn]"],
        "lotad": ["Route 102 [Hoenn]"],
    }


def test_header_first_uses_sheet_name_when_route_row_is_empty():
    rows = [["", ""], ["Lv", "Pokémon"], ["5", "Feebas"]]
    location_map = {}
    extract_header_first("Fishing", rows, location_map)
    assert location_map == {"feebas": ["Fishing [Fishing]"]}


def test_header_first_ignores_short_sheets():
    location_map = {}
    assert extract_header_first("Tiny", HOENN_SHEET[:2], location_map) == 0
    assert location_map == {}


# ---------------------------------------------------------------------------
# Family B
# ---------------------------------------------------------------------------


def test_route_row_family_reads_below_detected_row():
    location_map = {}
    extract_route_row("Kanto", KANTO_SHEET, location_map)

    assert location_map == {
        "pidgey": ["Route 1 [Kanto]"],
        "caterpie": ["Viridian Forest [Kanto]"],
        "zubat": ["Mt. Moon [Kanto]"],
        "rattata": ["Route 1 [Kanto]"],
        "pikachu": ["Viridian Forest [Kanto]"],
        "clefairy": ["Mt. Moon [Kanto]"],
    }


@pytest.mark.parametrize("sheet_name", ["Main", "Source", "Dex"])
def test_route_row_family_skips_reference_sheets(sheet_name):
    location_map = {}
    assert extract_route_row(sheet_name, KANTO_SHEET, location_map) == 0
    assert location_map == {}


def test_route_row_family_skips_sheet_without_route_row():
    rows = [
        ["Raid Den", "Species"],
        ["", ""],
        ["Pokémon", "Rarity"],
        ["Snorlax", "Rare"],
    ]
    location_map = {}
    assert extract_route_row("Raids", rows, location_map) == 0
    assert location_map == {}


# ---------------------------------------------------------------------------
# Workbook entry point
# ---------------------------------------------------------------------------


def test_workbook_tags_stay_distinct_per_sheet():
    sheets = {"Day": HOENN_SHEET, "Night": HOENN_SHEET}
    location_map = parse_encounter_workbook(sheets, FAMILY_HEADER_FIRST)

    assert location_map["zigzagoon"] == [
        "Route 101 [Day]",
        "Petalburg Woods [Day]",
        "Route 101 [Night]",
        "Petalburg Woods [Night]",
    ]


def test_workbook_route_row_family_skips_excluded_sheets():
    sheets = {"Main": KANTO_SHEET, "Kanto": KANTO_SHEET}
    location_map = parse_encounter_workbook(sheets, FAMILY_ROUTE_ROW)
    assert location_map["pidgey"] == ["Route 1 [Kanto]"]


def test_workbook_rejects_unknown_family():
    with pytest.raises(ValueError):
        parse_encounter_workbook({}, "diagonal")


def test_merge_location_maps_deduplicates_tags():
    merged = merge_location_maps([
        {"zubat": ["Mt. Moon [Kanto]"]},
        {"zubat": ["Mt. Moon [Kanto]", "Rock Tunnel [Kanto]"], "onix": ["Rock Tunnel [Kanto]"]},
    ])
    assert merged == {
        "zubat": ["Mt. Moon [Kanto]", "Rock Tunnel [Kanto]"],
        "onix": ["Rock Tunnel [Kanto]"],
    }
