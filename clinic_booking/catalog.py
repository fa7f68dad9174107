"""Catalog of specialties and practitioners (read-only after seeding)."""
from typing import Dict, Iterable, Optional, Tuple

from clinic_booking import config
from clinic_booking.errors import NotFoundError
from clinic_booking.state import Practitioner, Specialty


class CatalogStore:
    """
    Static reference lists of specialties and practitioners.

    Listing an unknown id yields an empty sequence; only the ``get_*``
    lookups treat a missing id as an error.
    """

    def __init__(
        self,
        specialties: Iterable[Specialty],
        practitioners: Iterable[Practitioner]
    ):
        self._specialties: Tuple[Specialty, ...] = tuple(specialties)
        self._practitioners: Tuple[Practitioner, ...] = tuple(practitioners)
        self._specialties_by_id: Dict[str, Specialty] = {
            s.id: s for s in self._specialties
        }
        self._practitioners_by_id: Dict[str, Practitioner] = {
            p.id: p for p in self._practitioners
        }

    @classmethod
    def from_config(cls) -> "CatalogStore":
        """Build the catalog from the seed lists in config."""
        return cls(
            specialties=[Specialty(**s) for s in config.SPECIALTIES],
            practitioners=[Practitioner(**p) for p in config.PRACTITIONERS],
        )

    def list_specialties(self) -> Tuple[Specialty, ...]:
        return self._specialties

    def list_practitioners(
        self,
        specialty_id: Optional[str] = None
    ) -> Tuple[Practitioner, ...]:
        if specialty_id is None:
            return self._practitioners
        return self.practitioners_by_specialty(specialty_id)

    def practitioners_by_specialty(self, specialty_id: str) -> Tuple[Practitioner, ...]:
        return tuple(
            p for p in self._practitioners if p.specialty_id == specialty_id
        )

    def get_specialty(self, specialty_id: str) -> Specialty:
        try:
            return self._specialties_by_id[specialty_id]
        except KeyError:
            raise NotFoundError(f"Specialty {specialty_id} not found")

    def get_practitioner(self, practitioner_id: str) -> Practitioner:
        try:
            return self._practitioners_by_id[practitioner_id]
        except KeyError:
            raise NotFoundError(f"Practitioner {practitioner_id} not found")
