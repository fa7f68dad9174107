"""Test the specialty/practitioner catalog."""
import pytest

from clinic_booking.catalog import CatalogStore
from clinic_booking.errors import NotFoundError
from clinic_booking.state import Practitioner, Specialty


def test_seeded_catalog(catalog):
    """Catalog is seeded with six specialties and seven practitioners."""
    assert len(catalog.list_specialties()) == 6
    assert len(catalog.list_practitioners()) == 7
    assert catalog.list_specialties()[0] == Specialty(id="1", name="Cardiología")


def test_practitioners_by_specialty(catalog):
    cardiology = catalog.practitioners_by_specialty("1")

    assert [p.id for p in cardiology] == ["1", "2"]
    assert all(p.specialty_id == "1" for p in cardiology)


def test_list_practitioners_filter_matches_by_specialty(catalog):
    assert catalog.list_practitioners("3") == catalog.practitioners_by_specialty("3")


def test_unknown_specialty_lists_nothing(catalog):
    assert catalog.practitioners_by_specialty("999") == ()
    assert catalog.list_practitioners("999") == ()


def test_get_unknown_ids_raise(catalog):
    with pytest.raises(NotFoundError):
        catalog.get_practitioner("999")
    with pytest.raises(NotFoundError):
        catalog.get_specialty("999")


def test_custom_catalog_keeps_order():
    catalog = CatalogStore(
        specialties=[Specialty("b", "B"), Specialty("a", "A")],
        practitioners=[Practitioner("p2", "Two", "a"), Practitioner("p1", "One", "a")],
    )

    assert [s.id for s in catalog.list_specialties()] == ["b", "a"]
    assert [p.id for p in catalog.practitioners_by_specialty("a")] == ["p2", "p1"]
