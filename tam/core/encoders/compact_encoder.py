import json

from pydantic import BaseModel

_SCALARS = (int, str, float, bool, type(None))


class CompactArrayEncoder(json.JSONEncoder):
    """JSON encoder that keeps long scalar arrays (e.g. dot ids) readable.

    Objects and nested arrays are indented two spaces per level. Arrays of
    scalars are written `items_per_line` values to a line instead of one
    value per line.
    """

    def __init__(self, *args, items_per_line: int = 10, **kwargs):
        super().__init__(*args, **kwargs)
        self.items_per_line = items_per_line

    def default(self, obj):
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", by_alias=True)
        return super().default(obj)

    def encode(self, obj):
        return self._encode_value(obj, 0)

    def _encode_value(self, obj, depth):
        if isinstance(obj, BaseModel):
            obj = self.default(obj)

        if isinstance(obj, dict):
            return self._encode_dict(obj, depth)
        if isinstance(obj, (list, tuple)):
            return self._encode_list(list(obj), depth)
        if isinstance(obj, _SCALARS):
            return json.dumps(obj)
        return self._encode_value(self.default(obj), depth)

    def _encode_dict(self, obj, depth):
        if not obj:
            return '{}'
        pad = '  ' * (depth + 1)
        lines = [
            f'{pad}{json.dumps(str(key))}: {self._encode_value(value, depth + 1)}'
            for key, value in obj.items()
        ]
        return '{\n' + ',\n'.join(lines) + '\n' + '  ' * depth + '}'

    def _encode_list(self, items, depth):
        if not items:
            return '[]'
        pad = '  ' * (depth + 1)

        if not all(isinstance(item, _SCALARS) for item in items):
            lines = [pad + self._encode_value(item, depth + 1) for item in items]
            return '[\n' + ',\n'.join(lines) + '\n' + '  ' * depth + ']'

        encoded = [json.dumps(item) for item in items]
        if len(encoded) <= self.items_per_line:
            return '[' + ', '.join(encoded) + ']'

        rows = [
            pad + ', '.join(encoded[i:i + self.items_per_line])
            for i in range(0, len(encoded), self.items_per_line)
        ]
        return '[\n' + ',\n'.join(rows) + '\n' + '  ' * depth + ']'
