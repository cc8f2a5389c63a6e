"""Keyword tables for recognising products and subtypes in order documents.

Entries are searched in order and the first entry with any keyword present
wins, so more specific phrases must not be shadowed by earlier entries.
Keywords are lowercase substrings of the normalized document text.
"""

PRODUCT_KEYWORDS = [
    {
        "canonical": "W Beam Crash Barrier",
        "keywords": ["w beam", "w-beam", "wbeam", "crash barrier"],
    },
    {
        "canonical": "Thrie Beam",
        "keywords": ["thrie beam", "thrie-beam"],
    },
    {
        "canonical": "Double W Beam",
        "keywords": ["double w beam", "double w-beam"],
    },
    {
        "canonical": "Crash-Tested",
        "keywords": ["crash tested", "crash-tested"],
    },
    {
        "canonical": "Hot Thermoplastic Paint",
        "keywords": ["hot thermoplastic paint", "thermoplastic paint", "hot paint"],
    },
    {
        "canonical": "Signages",
        "keywords": ["signages", "signage", "signs"],
    },
]

SUBTYPE_KEYWORDS = [
    {"canonical": "W-Beam", "keywords": ["w-beam", "w beam"]},
    {"canonical": "Thrie-Beam", "keywords": ["thrie-beam", "thrie beam"]},
    {"canonical": "Double W-Beam", "keywords": ["double w-beam", "double w beam"]},
    {"canonical": "Crash-Tested", "keywords": ["crash-tested", "crash tested"]},
    {"canonical": "White", "keywords": ["white"]},
    {"canonical": "Yellow", "keywords": ["yellow"]},
    {"canonical": "Reflective", "keywords": ["reflective"]},
    {"canonical": "Directional", "keywords": ["directional"]},
    {"canonical": "Informational", "keywords": ["informational"]},
    {"canonical": "Cautionary", "keywords": ["cautionary"]},
]
