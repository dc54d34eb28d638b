"""
Constants
"""

# Ignore pylint warnings
# pylint: disable = line-too-long


class Constants:
    """
    Constants configurations
    """

    HACKROM_DIR = "HackRomInfo"
    OUTPUT_DIR = "data/games"

    LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    LOG_DATE_FORMAT = "%H:%M:%S"

    # Identity card of every supported hackrom, written verbatim into its dataset
    GAME_CONFIG = {
        "runbun": {
            "name_en": "RunBun",
            "name_fr": "RunBun",
            "base_rom": "emerald",
            "version": "1.0",
            "author": "RunBun Team",
            "sort_order": 0,
            "coverage": "full",
        },
        "radical-red": {
            "name_en": "Radical Red",
            "name_fr": "Radical Red",
            "base_rom": "firered",
            "version": "4.1",
            "author": "sPokemon",
            "sort_order": 1,
            "coverage": "changes_only",
        },
        "emerald-imperium": {
            "name_en": "Emerald Imperium",
            "name_fr": "Emerald Imperium",
            "base_rom": "emerald",
            "version": "1.3",
            "author": "Emerald Imperium Team",
            "sort_order": 2,
            "coverage": "changes_only",
        },
    }

    # Source documents, relative to HACKROM_DIR
    GAME_SOURCES = {
        "runbun": {
            "directory": "RunBunDoc",
            "learnsets": "Learnset, Evolution Methods and Abilities.txt",
            "encounters": ["Pokémon Locations.xlsx"],
            "items": [],
            "item_pdf": "Item Locations.pdf",
        },
        "radical-red": {
            "directory": "RadicalRedDoc",
            "learnsets": None,
            "encounters": ["Pokémon Locations & Raid Dens v4.1 - Radical Red.xlsx"],
            "items": ["Item, TM, and Move Tutor Locations v4.1 - Radical Red.xlsx"],
            "item_pdf": None,
        },
        "emerald-imperium": {
            "directory": "EmeraldImperiumDoc",
            "learnsets": None,
            "encounters": ["Emerald Imperium 1.3 Encounter Tracker.xlsx"],
            "items": ["Item (TMs, Mega Stones, etc) and Useful NPC Locations_.xlsx"],
            "item_pdf": None,
        },
    }
