"""Synthetic person generation for bulk initialization."""

from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import Any

from legacysearch.exceptions import GenerationError
from legacysearch.schema.models import Address, Person

FIRST_NAMES = {
    "male": [
        "Adam", "Bruno", "Carlos", "David", "Enzo", "Felix", "Hugo", "Ivan",
        "Jules", "Karl", "Liam", "Marco", "Noah", "Oscar", "Paul", "Tom",
    ],
    "female": [
        "Alice", "Beatriz", "Chloe", "Diane", "Emma", "Fatima", "Gaia", "Hana",
        "Ines", "Julia", "Lea", "Maria", "Nina", "Olivia", "Rosa", "Zoe",
    ],
}

LAST_NAMES = [
    "Bernard", "Costa", "Dubois", "Fischer", "Garcia", "Hansen", "Jensen",
    "Kowalski", "Laurent", "Martin", "Novak", "Petit", "Rossi", "Schmidt",
    "Silva", "Weber",
]

# country -> (country code, cities)
COUNTRIES = {
    "France": ("FR", ["Paris", "Lyon", "Marseille", "Nantes", "Bordeaux"]),
    "Germany": ("DE", ["Berlin", "Munich", "Hamburg", "Cologne"]),
    "Italy": ("IT", ["Rome", "Milan", "Naples", "Turin"]),
    "Spain": ("ES", ["Madrid", "Barcelona", "Valencia", "Seville"]),
    "Portugal": ("PT", ["Lisbon", "Porto", "Braga"]),
    "Poland": ("PL", ["Warsaw", "Krakow", "Gdansk"]),
    "Denmark": ("DK", ["Copenhagen", "Aarhus", "Odense"]),
    "United Kingdom": ("GB", ["London", "Manchester", "Leeds", "Bristol"]),
}


@dataclass
class PersonGenerator:
    """Produces plausible random persons.

    Name and country dictionaries default to the built-in lists and can be
    replaced by a JSON file with ``first_names``, ``last_names`` and
    ``countries`` keys.
    """

    seed: int | None = None
    first_names: dict[str, list[str]] = field(default_factory=lambda: dict(FIRST_NAMES))
    last_names: list[str] = field(default_factory=lambda: list(LAST_NAMES))
    countries: dict[str, tuple[str, list[str]]] = field(default_factory=lambda: dict(COUNTRIES))

    def __post_init__(self) -> None:
        self._random = random.Random(self.seed)

    @classmethod
    def from_file(cls, path: str | Path, seed: int | None = None) -> PersonGenerator:
        """Load generator dictionaries from a JSON file.

        Raises:
            GenerationError: If the file cannot be read or lacks a dictionary
        """
        try:
            data: dict[str, Any] = json.loads(Path(path).read_text())
            return cls(
                seed=seed,
                first_names=data["first_names"],
                last_names=data["last_names"],
                countries={k: (v[0], list(v[1])) for k, v in data["countries"].items()},
            )
        except (OSError, json.JSONDecodeError, KeyError, TypeError, IndexError) as e:
            raise GenerationError(
                f"Cannot load generator dictionaries from {path}: {e}", {"path": str(path)}
            ) from e

    def generate(self) -> Person:
        """Generate one person without reference or identity.

        Raises:
            GenerationError: If a dictionary is empty
        """
        rnd = self._random
        try:
            gender = rnd.choice(sorted(self.first_names))
            name = f"{rnd.choice(self.first_names[gender])} {rnd.choice(self.last_names)}"
            country = rnd.choice(sorted(self.countries))
            country_code, cities = self.countries[country]
            city = rnd.choice(cities)
        except (IndexError, KeyError) as e:
            raise GenerationError(f"Generator dictionaries are incomplete: {e}") from e

        return Person(
            name=name,
            gender=gender,
            date_of_birth=self._date_of_birth(),
            children=rnd.choices([0, 1, 2, 3, 4], weights=[30, 25, 25, 15, 5])[0],
            address=Address(
                country=country,
                country_code=country_code,
                city=city,
                zipcode=f"{rnd.randint(1000, 99999):05d}",
            ),
        )

    def _date_of_birth(self) -> date:
        start = date(1940, 1, 1)
        span = (date(2005, 12, 31) - start).days
        return start + timedelta(days=self._random.randint(0, span))
