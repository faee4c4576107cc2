"""
Pasted-text pedigree import.

Turns a pedigree typed or pasted as plain text into pedigree slot values.
The text is split into generation blocks by marker lines such as
"Generation 3", "Gen 4", "Generación 2" or "Tercera generación" (a line
holding only a number from 1 to 5 also works). Inside a block:

- Generation 1: labelled lines ("Father: ...", "Madre: ...", "Sire ...").
- Generation 2: labelled lines ("Paternal grandmother: ...", "Abuelo materno: ...").
- Generations 3-5: one name per line, in slot order. Lines such as
  "Paternal line" or "Línea materna" switch the side; without them the
  first half of the names goes to the paternal side.

Bullets and list numbering are stripped from names. Imported values are
free-text names; resolve them against the herd with an AncestorIndex.
"""

import logging
import re

from farmika.pedigree.slots import ALL_SLOTS, GENERATION_SLOTS, MAX_GENERATION

logger = logging.getLogger(__name__)

# =============================================================================
# Markers
# =============================================================================

_ORDINALS = {
    "first": 1,
    "second": 2,
    "third": 3,
    "fourth": 4,
    "fifth": 5,
    "primera": 1,
    "segunda": 2,
    "tercera": 3,
    "cuarta": 4,
    "quinta": 5,
}

_NUMBERED_GENERATION = re.compile(r"\bgen(?:eration|eración|eracion|\.)?\s*([1-5])\b", re.IGNORECASE)
_ORDINAL_GENERATION = re.compile(
    r"\b(" + "|".join(_ORDINALS) + r")\s+generaci(?:on|ón)\b|\b(" + "|".join(_ORDINALS) + r")\s+generation\b",
    re.IGNORECASE,
)
_BARE_NUMBER = re.compile(r"^\s*([1-5])\s*[:.)]?\s*$")

_PATERNAL_SIDE = re.compile(
    r"\b(?:paternal|paterno|paterna|paternelle)\b|father'?s side|lado del padre",
    re.IGNORECASE,
)
_MATERNAL_SIDE = re.compile(
    r"\b(?:maternal|materno|materna|maternelle)\b|mother'?s side|lado de la madre",
    re.IGNORECASE,
)

_GEN1_LABELS = {
    "father_id": re.compile(r"\b(?:padre|father|sire)\b", re.IGNORECASE),
    "mother_id": re.compile(r"\b(?:madre|mother|dam)\b", re.IGNORECASE),
}

_GEN2_LABELS = {
    "paternal_grandfather_id": re.compile(r"abuelo\s+paterno|paternal\s+grandfather", re.IGNORECASE),
    "paternal_grandmother_id": re.compile(r"abuela\s+paterna|paternal\s+grandmother", re.IGNORECASE),
    "maternal_grandfather_id": re.compile(r"abuelo\s+materno|maternal\s+grandfather", re.IGNORECASE),
    "maternal_grandmother_id": re.compile(r"abuela\s+materna|maternal\s+grandmother", re.IGNORECASE),
}

_BULLET = re.compile(r"^[-•*►·]+\s*")
_NUMBERING = re.compile(r"^\d+[.)]\s*")


def clean_name(text: str) -> str:
    """Strip bullets, list numbering and extra whitespace from a name."""
    name = _BULLET.sub("", text.strip())
    name = _NUMBERING.sub("", name)
    return re.sub(r"\s+", " ", name).strip()


def detect_generation_marker(line: str) -> int | None:
    """Generation number (1-5) announced by a marker line, or None."""
    match = _NUMBERED_GENERATION.search(line)
    if match:
        return int(match.group(1))
    match = _ORDINAL_GENERATION.search(line)
    if match:
        return _ORDINALS[(match.group(1) or match.group(2)).lower()]
    match = _BARE_NUMBER.match(line)
    if match:
        return int(match.group(1))
    return None


def _split_value(line: str) -> str | None:
    """Text after the last colon, or None if the line has no colon."""
    if ":" not in line:
        return None
    return line.rsplit(":", 1)[1]


def detect_side_marker(line: str) -> str | None:
    """'paternal' or 'maternal' for a side heading, None for anything else.

    A line carrying a value after a colon is a labelled name, not a heading.
    """
    if _split_value(line):
        return None
    if _PATERNAL_SIDE.search(line):
        return "paternal"
    if _MATERNAL_SIDE.search(line):
        return "maternal"
    return None


def _labelled_name(line: str, label: re.Pattern) -> str:
    value = _split_value(line)
    if value is None:
        value = label.sub("", line)
    return clean_name(value)


# =============================================================================
# Parsing
# =============================================================================


class _LineageBlock:
    """Names for one of generations 3-5, split into paternal and maternal halves."""

    def __init__(self, generation: int):
        self.slots = GENERATION_SLOTS[generation]
        self.half = len(self.slots) // 2
        self.paternal: list[str] = []
        self.maternal: list[str] = []
        self.side: str | None = None

    def add(self, name: str) -> None:
        if self.side == "paternal" or (self.side is None and len(self.paternal) < self.half):
            self.paternal.append(name)
        else:
            self.maternal.append(name)

    def assign(self) -> dict[str, str]:
        dropped = max(0, len(self.paternal) - self.half) + max(0, len(self.maternal) - self.half)
        if dropped:
            logger.warning("Dropped %d extra names for %d slots", dropped, len(self.slots))
        assigned = dict(zip(self.slots[: self.half], self.paternal[: self.half]))
        assigned.update(zip(self.slots[self.half :], self.maternal[: self.half]))
        return assigned


def _labelled_generation(line: str, labels: dict[str, re.Pattern]) -> tuple[str, str] | None:
    # Match the label only, so a name such as "Padre Pio" cannot relabel a mother
    label_text = line.rsplit(":", 1)[0]
    for slot, label in labels.items():
        if label.search(label_text):
            name = _labelled_name(line, label)
            return (slot, name) if name else None
    return None


def parse_pedigree_text(text: str | None) -> dict[str, str]:
    """
    Parse generation-marked pedigree text into slot values.

    Args:
        text: Pasted pedigree text

    Returns:
        Dict of slot name -> ancestor name, in slot order; only slots that
        received a name are present (empty for blank text)
    """
    if not text or not text.strip():
        return {}

    values: dict[str, str] = {}
    blocks = {generation: _LineageBlock(generation) for generation in range(3, MAX_GENERATION + 1)}
    generation = 0

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        marker = detect_generation_marker(line)
        if marker is not None:
            generation = marker
            logger.debug("Entered generation %d", generation)
            continue

        if generation == 1:
            found = _labelled_generation(line, _GEN1_LABELS)
            if found:
                values[found[0]] = found[1]
            continue
        if generation == 2:
            found = _labelled_generation(line, _GEN2_LABELS)
            if found:
                values[found[0]] = found[1]
            continue
        if generation not in blocks:
            continue

        side = detect_side_marker(line)
        if side is not None:
            blocks[generation].side = side
            continue

        value = _split_value(line)
        name = clean_name(value if value is not None else line)
        if len(name) > 1:
            blocks[generation].add(name)

    for block in blocks.values():
        values.update(block.assign())

    logger.info("Parsed %d pedigree slots from text", len(values))
    return {slot: values[slot] for slot in ALL_SLOTS if slot in values}

