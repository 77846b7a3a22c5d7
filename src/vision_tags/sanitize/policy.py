"""Name policy for object tags.

All sets are keyed by trimmed, lowercased names. Czech and English spellings
are both listed because the tagging prompt asks for Czech names but generators
regularly answer in English.
"""

import re

# Placeholders copied from the prompt template instead of a real name.
JUNK_TOKENS: frozenset[str] = frozenset({"...", "…", "xxx", "object"})

# Substrings showing the generator echoed an instruction back as a "name".
INSTRUCTION_ECHO_PHRASES: tuple[str, ...] = (
    "concrete czech object name",
    "concrete czech-specific object name",
    "concrete object name",
    "czech object name",
    "czech name of the object",
    "object name in czech",
    "name of the object",
    "konkrétní český název",
    "konkrétní název objektu",
    "český název objektu",
    "název objektu",
    "low|medium|high",
    "return only valid json",
    "use czech names",
    "specific object name",
)

# "concrete <language>-specific object name" and similar template slots.
_ECHO_TEMPLATE_RE = re.compile(r"\bconcrete\s+(?:\S+\s+)?object\s+name\b")

# Relational, non-physical and scene-level terms excluded by policy.
SEMANTIC_BLACKLIST: frozenset[str] = frozenset(
    {
        # family and relationships
        "rodina",
        "rodiče",
        "matka",
        "máma",
        "maminka",
        "otec",
        "táta",
        "tatínek",
        "syn",
        "dcera",
        "sourozenci",
        "bratr",
        "sestra",
        "babička",
        "dědeček",
        "děda",
        "manžel",
        "manželka",
        "partner",
        "partnerka",
        "přítel",
        "přítelkyně",
        "family",
        "parents",
        "mother",
        "father",
        "son",
        "daughter",
        "siblings",
        "brother",
        "sister",
        "grandmother",
        "grandfather",
        "husband",
        "wife",
        "boyfriend",
        "girlfriend",
        # vacation, beach and sea scenes
        "pláž",
        "dovolená",
        "prázdniny",
        "moře",
        "oceán",
        "pobřeží",
        "léto",
        "výlet",
        "beach",
        "vacation",
        "holiday",
        "holidays",
        "sea",
        "ocean",
        "seaside",
        "coast",
        "shore",
        "summer",
        "trip",
    }
)

# Names too abstract to count as a recognizable object.
TOO_ABSTRACT: frozenset[str] = frozenset(
    {
        "scene",
        "environment",
        "background",
        "situation",
        "setting",
        "scéna",
        "prostředí",
        "pozadí",
        "situace",
    }
)


def normalize_name_key(name: str) -> str:
    """Key used for every membership and dedup check."""
    return name.strip().lower()


def is_junk(key: str) -> bool:
    return key in JUNK_TOKENS


def is_instruction_echo(key: str) -> bool:
    if _ECHO_TEMPLATE_RE.search(key):
        return True
    return any(phrase in key for phrase in INSTRUCTION_ECHO_PHRASES)


def is_blacklisted(key: str) -> bool:
    return key in SEMANTIC_BLACKLIST


def is_too_abstract(key: str) -> bool:
    return key in TOO_ABSTRACT
