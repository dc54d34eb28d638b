import pytest

from src.extract.keys import normalize, normalize_move, strip_move_label


@pytest.mark.parametrize(
    "display_name,expected",
    [
        ("Nidoran♀", "nidoran-f"),
        ("Nidoran ♂", "nidoran-m"),
        ("Mr. Mime", "mr-mime"),
        ("Farfetch'd", "farfetchd"),
        ("Farfetch’d", "farfetchd"),
        ("Flabébé", "flabebe"),
        ("Ho-Oh", "ho-oh"),
        ("  Type:  Null ", "type-null"),
        ("Porygon-Z", "porygon-z"),
        ("King's Rock", "kings-rock"),
        ("Route\t 101", "route-101"),
    ],
)
def test_normalize_known_names(display_name, expected):
    assert normalize(display_name) == expected


def test_normalize_is_total():
    assert normalize("") == ""
    assert normalize(None) == ""
    assert normalize("?!.") == ""
    assert normalize("--") == ""


def test_normalize_is_pure():
    name = "Nidoran♀ (Female)"
    assert normalize(name) == normalize(name) == "nidoran-f-female"


def test_normalize_keeps_typos_distinct():
    assert normalize("Charizard") != normalize("Charizrad")


@pytest.mark.parametrize(
    "label,expected",
    [
        ("TM 120 - Ice Spinner", "ice-spinner"),
        ("HM01 - Cut", "cut"),
        ("TM01Focus Punch", "focus-punch"),
        ("tm05: Roar", "roar"),
        ("Potion [x1]", "potion"),
        ("Rare Candy [3]", "rare-candy"),
        ("Ice Spinner", "ice-spinner"),
    ],
)
def test_normalize_move_strips_machine_and_quantity(label, expected):
    assert normalize_move(label) == expected


def test_strip_move_label_keeps_names_starting_with_letters_tm():
    assert strip_move_label("Tmnt Shell") == "Tmnt Shell"
