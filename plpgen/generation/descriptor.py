# plpgen/generation/descriptor.py
"""
The structured descriptor embedded in every .plp archive (data.plab).

Only a handful of fields are touched:

    objectsBundle
      text0 .. text3                 <- required layers
        textTextString               <- rendered text
        textTextColor / textTextFont <- interval maps
          <key>
            textsIntervalsEnd        <- must equal len(textTextString)

Everything else is carried through untouched.
"""
import copy
import json
from typing import Any, Dict, Iterable, Optional

from plpgen.core.exceptions import FormatError

OBJECTS_BUNDLE = "objectsBundle"
TEXT_FIELD = "textTextString"
INTERVAL_MAPS = ("textTextColor", "textTextFont")
INTERVAL_END = "textsIntervalsEnd"

REQUIRED_LAYERS = ("text0", "text1", "text2", "text3")


def text_length(text: str) -> int:
    """Length in UTF-16 code units, the unit the editor counts intervals in."""
    return len(text.encode("utf-16-le")) // 2


def substitute(tree: Dict[str, Any], layer_name: str, new_text: str) -> None:
    """
    Overwrite a layer's text and resync its interval ends, in place.

    The layer must exist; absent interval maps or non-object entries are
    skipped.
    """
    layer = tree[OBJECTS_BUNDLE][layer_name]
    layer[TEXT_FIELD] = new_text

    end = text_length(new_text)
    for map_name in INTERVAL_MAPS:
        intervals = layer.get(map_name)
        if not isinstance(intervals, dict):
            continue
        for interval in intervals.values():
            if isinstance(interval, dict) and INTERVAL_END in interval:
                interval[INTERVAL_END] = end


class Descriptor:
    """Parsed data.plab tree with the accessors the pipeline needs."""

    def __init__(self, tree: Dict[str, Any]):
        self.tree = tree

    @classmethod
    def parse(cls, raw: bytes, entry: Optional[str] = None) -> "Descriptor":
        try:
            tree = json.loads(raw.decode("utf-8-sig"))  # tolerates a leading BOM
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise FormatError(f"Descriptor is not valid JSON: {e}", entry=entry) from e
        if not isinstance(tree, dict):
            raise FormatError("Descriptor root must be a JSON object", entry=entry)
        return cls(tree)

    @property
    def bundle(self) -> Optional[Dict[str, Any]]:
        bundle = self.tree.get(OBJECTS_BUNDLE)
        return bundle if isinstance(bundle, dict) else None

    def require_layers(self, names: Iterable[str] = REQUIRED_LAYERS) -> None:
        """Raise FormatError naming the first missing layer."""
        bundle = self.bundle or {}
        for name in names:
            if not isinstance(bundle.get(name), dict):
                raise FormatError(f"Template missing layer {name}", entry=name)

    def clone(self) -> "Descriptor":
        return Descriptor(copy.deepcopy(self.tree))

    def substitute(self, layer_name: str, new_text: str) -> None:
        substitute(self.tree, layer_name, new_text)

    def layer_text(self, layer_name: str) -> Optional[str]:
        layer = (self.bundle or {}).get(layer_name)
        if not isinstance(layer, dict):
            return None
        return layer.get(TEXT_FIELD)

    def to_bytes(self) -> bytes:
        return json.dumps(self.tree, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
