"""Tests for wire types and the search response envelope."""

import json
from datetime import date

import pytest

from legacysearch import (
    Address,
    Person,
    PersonDocument,
    SearchHit,
    ValidationError,
    build_response,
)
from legacysearch.service.response import serialize_response


class TestPersonDocument:
    def test_from_payload(self):
        document = PersonDocument.from_payload(
            {
                "reference": "42",
                "name": "Ada",
                "date_of_birth": "1815-12-10",
                "address": {"city": "London"},
            }
        )
        assert document.date_of_birth == date(1815, 12, 10)
        assert document.address.city == "London"
        assert document.address.country is None

    def test_invalid_payload(self):
        """Pydantic errors surface as a ValidationError keyed by field."""
        with pytest.raises(ValidationError) as exc_info:
            PersonDocument.from_payload({"name": "Ada", "children": "many"})
        assert "children" in exc_info.value.field_errors

    def test_nested_invalid_payload(self):
        with pytest.raises(ValidationError) as exc_info:
            PersonDocument.from_payload({"address": {"city": ["not", "a", "string"]}})
        assert "address.city" in exc_info.value.field_errors

    def test_to_person_ignores_identity(self):
        """Inbound ids never reach the record store."""
        person = PersonDocument.from_payload({"id": 99, "name": "Ada"}).to_person()
        assert person.id is None
        assert person.name == "Ada"
        assert person.address is None

    def test_to_person_builds_address(self):
        person = PersonDocument.from_payload({"address": {"country": "France"}}).to_person()
        assert isinstance(person.address, Address)
        assert person.address.country == "France"

    def test_from_person(self):
        person = Person(
            id=3,
            reference="r",
            name="Joe",
            date_of_birth=date(1970, 1, 2),
            address=Address(city="Paris"),
        )
        document = PersonDocument.from_person(person)
        assert document.id == 3
        assert document.reference == "r"
        assert document.address.city == "Paris"


class TestResponseEnvelope:
    def test_wire_shape(self):
        """Hits are wrapped under _source and total sits next to them."""
        documents = [PersonDocument(reference="1", name="Joe")]
        payload = serialize_response(build_response(documents, total=12, took=3))

        assert json.loads(payload) == {
            "took": 3,
            "hits": {
                "total": 12,
                "hits": [
                    {
                        "_source": {
                            "id": None,
                            "reference": "1",
                            "name": "Joe",
                            "date_of_birth": None,
                            "gender": None,
                            "children": None,
                            "address": None,
                        }
                    }
                ],
            },
        }

    def test_order_is_preserved(self):
        response = build_response(["b", "a", "c"], total=3, took=0)
        assert [h.source for h in response.hits.hits] == ["b", "a", "c"]

    def test_total_hits_alias(self):
        response = build_response([], total=7, took=0)
        assert response.hits.total_hits == 7
        assert "total_hits" not in json.loads(serialize_response(response))["hits"]

    def test_empty_results(self):
        payload = json.loads(serialize_response(build_response([], total=0, took=1)))
        assert payload["hits"] == {"total": 0, "hits": []}

    def test_search_hit_accepts_alias(self):
        hit = SearchHit.model_validate({"_source": {"name": "Joe"}})
        assert hit.source == {"name": "Joe"}
        assert hit.model_dump(by_alias=True) == {"_source": {"name": "Joe"}}
