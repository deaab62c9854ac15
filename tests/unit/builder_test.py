"""Tests for the immutable document, resource, relationship and error builders."""

from __future__ import annotations

from typing import Any

import pytest

from jsonapi_core.core.builder import (
    CollectionDocumentBuilder,
    DocumentBuilder,
    ErrorBuilder,
    ErrorDocumentBuilder,
    MetaDocumentBuilder,
    RelationshipBuilder,
    ResourceBuilder,
    SingleDocumentBuilder,
    link,
    resource_identifier,
)
from jsonapi_core.core.document import ErrorDocument, Resource
from jsonapi_core.exceptions import DocumentShapeError, ResourceIdentityError

JSONAPI = {"jsonapi": {"version": "1.0"}}
DATA_SETTERS = {"resource", "resources", "append", "error", "include"}


def _article(id: str = "1", title: str = "Hello") -> ResourceBuilder:
    return ResourceBuilder(type="articles").with_id(id).attribute("title", title)


class TestDocumentBuilder:
    def test_single_document(self) -> None:
        document = DocumentBuilder.single().resource(_article()).build()
        assert document.to_dict() == {
            **JSONAPI,
            "data": {"type": "articles", "id": "1", "attributes": {"title": "Hello"}},
        }

    def test_single_without_data_is_null(self) -> None:
        assert DocumentBuilder.single().build().to_dict() == {**JSONAPI, "data": None}

    def test_empty_collection(self) -> None:
        assert DocumentBuilder.collection().build().to_dict() == {**JSONAPI, "data": []}

    def test_links_and_meta_only_when_set(self) -> None:
        document = DocumentBuilder.collection().with_links({"self": "http://api.test/articles"}).build()
        assert "meta" not in document.to_dict()
        assert document.to_dict()["links"] == {"self": "http://api.test/articles"}

    def test_meta_is_replaced_not_merged(self) -> None:
        document = DocumentBuilder.single().with_meta({"a": 1}).with_meta({"b": 2}).build()
        assert document.to_dict()["meta"] == {"b": 2}

    def test_link_objects(self) -> None:
        document = DocumentBuilder.single().with_links({"self": link("http://api.test", {"v": 1})}).build()
        assert document.to_dict()["links"] == {"self": {"href": "http://api.test", "meta": {"v": 1}}}

    def test_setters_return_new_builders(self) -> None:
        base = DocumentBuilder.collection().with_meta({"total": 2})
        extended = base.append(_article("1")).append(_article("2"))

        assert base.build().to_dict()["data"] == []
        assert [r["id"] for r in extended.build().to_dict()["data"]] == ["1", "2"]
        assert extended.build().to_dict()["meta"] == {"total": 2}

    def test_resources_replace_collection(self) -> None:
        builder = DocumentBuilder.collection().append(_article("1")).resources([_article("2")])
        assert [r["id"] for r in builder.build().to_dict()["data"]] == ["2"]

    def test_included(self) -> None:
        author = ResourceBuilder(type="people").with_id("9").attribute("name", "Ada")
        document = DocumentBuilder.single().resource(_article()).include(author).build()
        assert document.to_dict()["included"] == [{"type": "people", "id": "9", "attributes": {"name": "Ada"}}]

    def test_version(self) -> None:
        assert DocumentBuilder.single("1.1").build().to_dict()["jsonapi"] == {"version": "1.1"}

    @pytest.mark.parametrize(
        ("builder", "setter", "argument"),
        [
            (DocumentBuilder.single(), "resources", []),
            (DocumentBuilder.single(), "append", _article()),
            (DocumentBuilder.collection(), "resource", None),
            (DocumentBuilder.errors(), "resource", _article()),
            (DocumentBuilder.single(), "error", ErrorBuilder().with_status(500)),
            (DocumentBuilder.meta_only({"a": 1}), "include", _article()),
        ],
        ids=[
            "single-resources",
            "single-append",
            "collection-resource",
            "errors-resource",
            "single-error",
            "meta-include",
        ],
    )
    def test_shape_conflicts_fail_fast(self, builder: object, setter: str, argument: object) -> None:
        with pytest.raises(DocumentShapeError):
            getattr(builder, setter)(argument)

    @pytest.mark.parametrize(
        ("builder", "shape", "setters"),
        [
            (SingleDocumentBuilder, "single", {"resource", "include"}),
            (CollectionDocumentBuilder, "collection", {"resources", "append", "include"}),
            (ErrorDocumentBuilder, "errors", {"error"}),
            (MetaDocumentBuilder, "meta", set()),
        ],
    )
    def test_each_shape_only_has_its_own_setters(self, builder: Any, shape: str, setters: set[str]) -> None:
        assert builder.shape == shape
        assert {name for name in DATA_SETTERS if name in dir(builder)} == setters

    def test_factories_return_shape_builders(self) -> None:
        assert isinstance(DocumentBuilder.single(), SingleDocumentBuilder)
        assert isinstance(DocumentBuilder.collection(), CollectionDocumentBuilder)
        assert isinstance(DocumentBuilder.errors(), ErrorDocumentBuilder)
        assert isinstance(DocumentBuilder.meta_only(), MetaDocumentBuilder)

    def test_unknown_attributes_are_still_missing(self) -> None:
        assert not hasattr(DocumentBuilder.single(), "nothing")

    def test_error_document(self) -> None:
        document = DocumentBuilder.errors().error(ErrorBuilder().with_status(404).with_title("Not Found")).build()
        assert isinstance(document, ErrorDocument)
        assert document.to_dict() == {**JSONAPI, "errors": [{"status": "404", "title": "Not Found"}]}

    def test_error_document_without_errors(self) -> None:
        with pytest.raises(DocumentShapeError):
            DocumentBuilder.errors().build()

    def test_meta_only_document(self) -> None:
        document = DocumentBuilder.meta_only({"deleted": True}).build()
        assert document.to_dict() == {**JSONAPI, "meta": {"deleted": True}}

    def test_meta_only_without_meta(self) -> None:
        with pytest.raises(DocumentShapeError):
            DocumentBuilder.meta_only().build()


class TestResourceBuilder:
    def test_needs_id_or_lid(self) -> None:
        with pytest.raises(ResourceIdentityError):
            ResourceBuilder(type="articles").build()

    def test_id_then_lid_is_rejected(self) -> None:
        with pytest.raises(ResourceIdentityError):
            ResourceBuilder(type="articles").with_id("1").with_lid("tmp")

    def test_lid_then_id_is_rejected(self) -> None:
        with pytest.raises(ResourceIdentityError):
            ResourceBuilder(type="articles").with_lid("tmp").with_id("1")

    def test_lid_resource(self) -> None:
        resource = ResourceBuilder(type="articles").with_lid("tmp").build()
        assert resource.to_dict() == {"type": "articles", "lid": "tmp", "attributes": {}}

    def test_attributes_merge(self) -> None:
        resource = _article().with_attributes({"body": "..."}).build()
        assert resource.attributes == {"title": "Hello", "body": "..."}

    def test_relationships_links_and_meta(self) -> None:
        resource = (
            _article()
            .relationship("author", RelationshipBuilder().to_one(resource_identifier("people", "9")))
            .with_links({"self": "http://api.test/articles/1"})
            .with_meta({"views": 3})
            .build()
        )
        assert isinstance(resource, Resource)
        assert resource.to_dict() == {
            "type": "articles",
            "id": "1",
            "attributes": {"title": "Hello"},
            "relationships": {"author": {"data": {"type": "people", "id": "9"}}},
            "links": {"self": "http://api.test/articles/1"},
            "meta": {"views": 3},
        }

    def test_builder_is_not_mutated(self) -> None:
        base = _article()
        base.attribute("body", "x")
        assert base.build().attributes == {"title": "Hello"}


class TestRelationshipBuilder:
    def test_empty_relationship_is_rejected(self) -> None:
        with pytest.raises(DocumentShapeError):
            RelationshipBuilder().build()

    def test_null_to_one(self) -> None:
        assert RelationshipBuilder().to_one(None).build().to_dict() == {"data": None}

    def test_to_many_with_links(self) -> None:
        relationship = (
            RelationshipBuilder()
            .to_many([resource_identifier("comments", "5"), resource_identifier("comments", lid="new")])
            .with_links({"related": "http://api.test/articles/1/comments"})
            .build()
        )
        assert relationship.to_dict() == {
            "links": {"related": "http://api.test/articles/1/comments"},
            "data": [{"type": "comments", "id": "5"}, {"type": "comments", "lid": "new"}],
        }

    def test_meta_only(self) -> None:
        assert RelationshipBuilder().with_meta({"count": 2}).build().to_dict() == {"meta": {"count": 2}}


def test_resource_identifier_needs_exactly_one_identity() -> None:
    with pytest.raises(ResourceIdentityError):
        resource_identifier("people")
    with pytest.raises(ResourceIdentityError):
        resource_identifier("people", "1", "tmp")


def test_error_builder() -> None:
    error = (
        ErrorBuilder()
        .with_id("e1")
        .with_status(400)
        .with_code("invalid")
        .with_detail("bad value")
        .pointer("/data/attributes/title")
        .build()
    )
    assert error.to_dict() == {
        "id": "e1",
        "status": "400",
        "code": "invalid",
        "detail": "bad value",
        "source": {"pointer": "/data/attributes/title"},
    }
