"""Positional comparison of two recipe version snapshots.

Lines are aligned by index only: inserting an ingredient at the top of a list
reports every following line as modified instead of re-synchronising the two
sequences. Counts shown to users depend on this, so keep it positional.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from .shapes import FreeText, Sectioned, load_ingredients, load_instructions

ADDITION = 'addition'
DELETION = 'deletion'
MODIFICATION = 'modification'
UNCHANGED = 'unchanged'

DETAIL_FIELDS = [
    ('name', 'Recipe Name'),
    ('description', 'Description'),
    ('cookTime', 'Cook Time'),
    ('servings', 'Servings'),
    ('originalSource', 'Original Source'),
    ('viewCount', 'View Count'),
]


@dataclass(frozen=True)
class Heading:
    label: str

    def display(self):
        return self.label


@dataclass
class LineChange:
    index: int
    type: str
    before: Optional[str] = None
    after: Optional[str] = None
    label: Optional[str] = None

    def to_dict(self):
        data = {'index': self.index, 'type': self.type, 'before': self.before, 'after': self.after}
        if self.label is not None:
            data['label'] = self.label
        return data


@dataclass
class BlockDiff:
    title: str
    lines: List[LineChange] = field(default_factory=list)

    @property
    def has_changes(self):
        return any(line.type != UNCHANGED for line in self.lines)

    def to_dict(self):
        return {
            'title': self.title,
            'status': 'changed' if self.has_changes else 'unchanged',
            'lines': [line.to_dict() for line in self.lines],
        }


@dataclass
class DiffStats:
    additions: int = 0
    deletions: int = 0
    changes: int = 0

    def count(self, change_type):
        if change_type == ADDITION:
            self.additions += 1
        elif change_type == DELETION:
            self.deletions += 1
        elif change_type == MODIFICATION:
            self.changes += 1

    def to_dict(self):
        return {'additions': self.additions, 'deletions': self.deletions, 'changes': self.changes}


@dataclass
class VersionDiff:
    version1: Optional[int]
    version2: Optional[int]
    details: BlockDiff
    ingredients: BlockDiff
    instructions: BlockDiff
    stats: DiffStats

    def to_dict(self):
        return {
            'version1': self.version1,
            'version2': self.version2,
            'details': self.details.to_dict(),
            'ingredients': self.ingredients.to_dict(),
            'instructions': self.instructions.to_dict(),
            'stats': self.stats.to_dict(),
        }


def _lines(entries):
    """Flatten a decoded list; each section contributes a heading line before its entries."""
    if isinstance(entries, Sectioned):
        lines = []
        for section in entries.sections:
            lines.append(Heading(section.label))
            lines.extend(section.items)
        return lines
    return entries.entries()


def _display(item):
    if isinstance(item, str):
        return item
    return item.display()


def _equal(a, b):
    if isinstance(a, Heading) or isinstance(b, Heading):
        return a == b
    if type(a) is not type(b):
        # A free-text entry matches a structured one only through its rendering.
        if isinstance(a, FreeText) or isinstance(b, FreeText):
            return _display(a) == _display(b)
        return False
    return a == b


def compare_sequences(title, before, after, stats):
    block = BlockDiff(title)
    for i in range(max(len(before), len(after))):
        a = before[i] if i < len(before) else None
        b = after[i] if i < len(after) else None
        if a is None:
            change = LineChange(i + 1, ADDITION, after=_display(b))
        elif b is None:
            change = LineChange(i + 1, DELETION, before=_display(a))
        elif not _equal(a, b):
            change = LineChange(i + 1, MODIFICATION, before=_display(a), after=_display(b))
        else:
            change = LineChange(i + 1, UNCHANGED, before=_display(a), after=_display(b))
        stats.count(change.type)
        block.lines.append(change)
    return block


def compare_details(data1, data2, stats):
    block = BlockDiff('Details')
    for i, (key, label) in enumerate(DETAIL_FIELDS, start=1):
        value1, value2 = data1.get(key), data2.get(key)
        # Strict comparison: servings 4 and "4" differ.
        changed = _kind(value1) != _kind(value2) or value1 != value2
        change_type = MODIFICATION if changed else UNCHANGED
        stats.count(change_type)
        block.lines.append(LineChange(
            i, change_type, before=_str(value1), after=_str(value2), label=label
        ))
    return block


def _kind(value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return 'number'
    return type(value).__name__


def _str(value):
    return '' if value is None else str(value)


def diff(version_a, version_b):
    """Compare two versions (``Version`` rows or their ``to_dict()`` form)."""
    a, b = _as_dict(version_a), _as_dict(version_b)
    data1, data2 = a.get('data') or {}, b.get('data') or {}

    stats = DiffStats()
    details = compare_details(data1, data2, stats)
    ingredients = compare_sequences(
        'Ingredients',
        _lines(load_ingredients(data1.get('ingredients'))),
        _lines(load_ingredients(data2.get('ingredients'))),
        stats,
    )
    instructions = compare_sequences(
        'Instructions',
        _lines(load_instructions(data1.get('instructions'))),
        _lines(load_instructions(data2.get('instructions'))),
        stats,
    )
    return VersionDiff(a.get('version'), b.get('version'), details, ingredients, instructions, stats)


def _as_dict(version):
    if isinstance(version, dict):
        return version
    return version.to_dict()
