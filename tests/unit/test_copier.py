"""Tests for merge-on-update field copying."""

from datetime import date

import pytest

from legacysearch import Address, FieldCopier, Person


@pytest.fixture
def copier() -> FieldCopier:
    return FieldCopier()


def test_copies_only_set_fields(copier: FieldCopier):
    """Null source fields leave the target value alone."""
    target = Person(reference="1", name="Joe", gender="male", children=2)
    source = Person(name="Joe Smith", children=0)

    copier.copy(source, target)

    assert target.name == "Joe Smith"
    assert target.children == 0
    assert target.gender == "male"
    assert target.reference == "1"


def test_identity_is_preserved(copier: FieldCopier):
    """Primary and foreign keys are never copied."""
    target = Person(id=7, address_id=3, name="Joe")
    source = Person(id=99, address_id=42, name="Joe Smith")

    copier.copy(source, target)

    assert target.id == 7
    assert target.address_id == 3
    assert target.name == "Joe Smith"


def test_nested_relation_is_merged(copier: FieldCopier):
    target = Person(address=Address(id=5, country="France", city="Paris", zipcode="75001"))
    source = Person(address=Address(id=8, city="Lyon"))

    copier.copy(source, target)

    assert target.address.id == 5
    assert target.address.country == "France"
    assert target.address.city == "Lyon"
    assert target.address.zipcode == "75001"


def test_missing_relation_gets_a_copy(copier: FieldCopier):
    """A target without address receives a fresh one, not the source's instance."""
    incoming = Address(country="Germany", city="Berlin")
    target = Person(name="Ada")

    copier.copy(Person(address=incoming), target)

    assert target.address is not None
    assert target.address is not incoming
    assert target.address.city == "Berlin"
    assert target.address.country == "Germany"


def test_dates_are_copied(copier: FieldCopier):
    target = Person(date_of_birth=date(1970, 1, 1))
    copier.copy(Person(date_of_birth=date(1980, 2, 2)), target)
    assert target.date_of_birth == date(1980, 2, 2)


def test_returns_target(copier: FieldCopier):
    target = Person()
    assert copier.copy(Person(name="x"), target) is target


def test_type_mismatch(copier: FieldCopier):
    with pytest.raises(TypeError):
        copier.copy(Address(city="Paris"), Person())
