# Reader/writer for the gallery listing (_data/gallery.yml)
#
# Only the fixed shape the site uses is understood:
#
#   - image: "photo.jpg"
#     caption: "A caption"
#     category: "travel"
#
# Values are single-line strings. Nested structures, multi-line scalars and
# typed values (numbers, booleans) are not supported.

import re

from .errors import ValidationError

EMPTY_GALLERY = '# Gallery is empty\n'
KNOWN_KEYS = ('image', 'caption', 'category')

_KEY_VALUE = re.compile(r'^(\w+)\s*:\s*(.*)$')
_ESCAPED = re.compile(r'\\([\\"])')


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return _ESCAPED.sub(r'\1', value[1:-1])
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]
    return value


def _parse_key_value(text: str):
    match = _KEY_VALUE.match(text)
    if not match:
        return None
    return match.group(1), _unquote(match.group(2).strip())


def decode(text: str) -> list:
    """Parse listing text into an ordered list of entry dicts."""
    entries = []
    current = None

    # only \n ends a line; other Unicode line breaks are ordinary characters in a value
    for line in text.split('\n'):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith('#'):
            continue

        if trimmed.startswith('- '):
            if current is not None:
                entries.append(current)
            current = {}
            parsed = _parse_key_value(trimmed[2:].strip())
        elif current is not None:
            parsed = _parse_key_value(trimmed)
        else:
            parsed = None

        if parsed:
            key, value = parsed
            current[key] = value

    if current is not None:
        entries.append(current)
    return entries


def _quote(value: str) -> str:
    return '"' + value.replace('\\', '\\\\').replace('"', '\\"') + '"'


def encode(entries) -> str:
    """Serialise entries back to listing text. Empty captions/categories are omitted."""
    if not entries:
        return EMPTY_GALLERY

    blocks = []
    for entry in entries:
        lines = [f'- image: {_quote(entry["image"])}']
        for key in ('caption', 'category'):
            if entry.get(key):
                lines.append(f'  {key}: {_quote(entry[key])}')
        for key, value in entry.items():
            if key not in KNOWN_KEYS and value is not None:
                lines.append(f'  {key}: {_quote(value)}')
        blocks.append('\n'.join(lines))
    return '\n\n'.join(blocks) + '\n'


def validate_entries(entries) -> list:
    """Check a JSON payload can be written as a listing. Returns the entries unchanged."""
    if not isinstance(entries, list):
        raise ValidationError('entries must be a list')

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValidationError(f'entries[{index}] must be an object')
        image = entry.get('image')
        if not isinstance(image, str) or not image.strip():
            raise ValidationError(f'entries[{index}].image required')
        for key, value in entry.items():
            if not re.fullmatch(r'\w+', str(key)):
                raise ValidationError(f'entries[{index}] has an invalid key: {key}')
            if value is None and key != 'image':
                continue
            if not isinstance(value, str):
                raise ValidationError(f'entries[{index}].{key} must be a string')
            if '\n' in value or '\r' in value:
                raise ValidationError(f'entries[{index}].{key} must be a single line')
    return entries
