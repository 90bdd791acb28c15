# plpgen/generation/records.py
"""
Per-unit field values.

Names are drawn independently for every unit (with replacement), so
repeats inside one batch are expected; the filename allocator takes care
of them.
"""
import random
from dataclasses import dataclass
from typing import Dict, Optional

from plpgen.generation.options import DEFAULT_LAST_NAME, DEFAULT_TEXT2, GenerationOptions

FIRST_NAMES = [
    "Ahsan", "Arafat", "Arif", "Asif", "Aziz", "Fahim", "Farhan", "Hasan", "Imran", "Jahid",
    "Kamal", "Mahmud", "Mehedi", "Naim", "Rafi", "Rahim", "Rashed", "Sabbir", "Saif", "Sajid",
    "Sakib", "Tanvir", "Tareq", "Yasin", "Zahid", "Ayesha", "Farzana", "Lamia", "Maliha",
    "Nafisa", "Nusrat", "Raisa", "Sabina", "Sadia", "Shirin", "Sumaiya", "Tahmina", "Tania",
    "Zannat",
]

LAST_NAMES = [
    "Ahmed", "Akter", "Ali", "Amin", "Bhuiyan", "Chowdhury", "Haque", "Hasan", "Hossain",
    "Islam", "Jahan", "Khan", "Miah", "Mollah", "Rahman", "Rashid", "Sarker", "Siddique",
    "Sikder", "Sultana", "Uddin", "Das", "Dey", "Roy", "Saha", "Mondal", "Paul", "Biswas",
]


def title_case(value: str) -> str:
    """'  mD   ahsan ' -> 'Md Ahsan'"""
    words = (value or "").split()
    return " ".join(w[0].upper() + w[1:].lower() for w in words)


@dataclass(frozen=True)
class UnitRecord:
    full_name: str
    text1: str
    text2: str
    text3: str

    def layer_texts(self) -> Dict[str, str]:
        """Text for each required layer, in layer order."""
        return {
            "text0": self.full_name,
            "text1": self.text1,
            "text2": self.text2,
            "text3": self.text3,
        }


class RecordGenerator:
    """Produces UnitRecords; pass a seeded Random for reproducible output."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def first_name(self, options: GenerationOptions) -> str:
        if options.first_mode == "fixed":
            return title_case(options.fixed_first)
        return self.rng.choice(FIRST_NAMES)

    def last_name(self, options: GenerationOptions) -> str:
        if options.last_mode == "fixed":
            return title_case(options.fixed_last or DEFAULT_LAST_NAME)
        return self.rng.choice(LAST_NAMES)

    def serial(self) -> str:
        return f"451-{self.rng.randint(0, 999):03d}-{self.rng.randint(0, 999):03d}"

    def receipt(self) -> str:
        return f"NSU-RCPT-{self.rng.randint(0, 999999):06d}F"

    def next_record(self, options: GenerationOptions) -> UnitRecord:
        first = self.first_name(options)
        last = self.last_name(options)
        return UnitRecord(
            full_name=f"{first} {last}".strip(),
            text1=self.serial(),
            text2=options.text2 or DEFAULT_TEXT2,
            text3=self.receipt(),
        )
