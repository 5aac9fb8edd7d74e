import copy
from decimal import Decimal

import pytest
from boto3.dynamodb.types import Binary

from app.core.errors import AttributeSpecError
from app.core.lookup.projection import Projector, render_value

RECORDS = [
    {"id": "u1", "name": "Alice", "score": Decimal("42"), "createdAt": "2024-01-15T13:45:00Z"},
    {"id": "u2", "name": "Bob", "score": Decimal("0")},
    {"id": "u3"},
]


def make_projector(options, **update):
    return Projector(options.model_copy(update=update))


def test_summary_tags_are_rule_major(options):
    """Outer loop over rules, inner loop over records"""
    projector = make_projector(options, summary_attributes="Name:name, id")
    assert projector.summary_tags(RECORDS) == [
        "Name: Alice",
        "Name: Bob",
        "u1",
        "u2",
        "u3",
    ]


def test_summary_tags_skip_falsy_values(options):
    projector = make_projector(options, summary_attributes="Score:score")
    assert projector.summary_tags(RECORDS) == ["Score: 42"]


def test_summary_tags_apply_parser(options):
    projector = make_projector(options, summary_attributes="Created:date-iso:createdAt")
    assert projector.summary_tags(RECORDS) == ["Created: 1/15/2024, 1:45 PM"]


def test_summary_tags_fall_back_to_result_count(options):
    projector = make_projector(options, summary_attributes="missing")
    assert projector.summary_tags([]) == ["0 results"]
    assert projector.summary_tags(RECORDS[:1]) == ["1 result"]
    assert projector.summary_tags(RECORDS) == ["3 results"]


def test_summary_tags_without_rules_fall_back_too(options):
    projector = make_projector(options, summary_attributes="")
    assert projector.summary_tags(RECORDS[:2]) == ["2 results"]


def test_details_show_raw_json_without_detail_attributes(options):
    projector = make_projector(options, detail_attributes="  ")
    details = projector.details(RECORDS)
    assert details == {"showAsJson": True, "results": RECORDS}
    assert details["results"] is RECORDS


def test_details_keep_only_truthy_attributes_and_drop_empty_records(options):
    projector = make_projector(
        options,
        detail_attributes="Name:name, Score:score, Created:date-iso:createdAt",
        document_title_attribute="User:id",
    )
    assert projector.details(RECORDS) == {
        "showAsJson": False,
        "results": [
            {
                "title": "User: u1",
                "attributes": [
                    {"key": "Name", "value": "Alice"},
                    {"key": "Score", "value": Decimal("42")},
                    {"key": "Created", "value": "1/15/2024, 1:45 PM"},
                ],
            },
            {"title": "User: u2", "attributes": [{"key": "Name", "value": "Bob"}]},
        ],
    }


def test_document_title_variants(options):
    assert make_projector(options, document_title_attribute="").document_title(
        RECORDS[0]
    ) is None
    assert make_projector(options, document_title_attribute=":name").document_title(
        RECORDS[0]
    ) == "Alice"
    # Only the first title rule counts
    assert make_projector(options, document_title_attribute="name, id").document_title(
        RECORDS[0]
    ) == "name: Alice"
    assert make_projector(options, document_title_attribute="Name:name").document_title(
        RECORDS[2]
    ) is None


def test_project_is_pure(options):
    projector = make_projector(options, summary_attributes="Name:name, Score:score")
    records = copy.deepcopy(RECORDS)

    first = projector.project(records)
    second = Projector(options.model_copy(update={"summary_attributes": "Name:name, Score:score"})).project(records)

    assert first == second
    assert repr(first) == repr(second)
    assert records == RECORDS


def test_bad_spec_fails_when_compiling(options):
    with pytest.raises(AttributeSpecError):
        make_projector(options, detail_attributes="a:b:c:d")


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("42"), "42"),
        (Decimal("1.50"), "1.5"),
        (Decimal("1E+2"), "100"),
        (1.0, "1"),
        (True, "true"),
        (["a", "b"], "a, b"),
        ({"b", "a"}, "a, b"),
        (b"\x01\x02", "AQI="),
        (Binary(b"\xff\xfe"), "//4="),
    ],
)
def test_render_value(value, expected):
    assert render_value(value) == expected
