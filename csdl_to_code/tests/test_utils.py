import pytest

from csdl_to_code.utils import pascal_to_snake_case, snake_to_pascal_case


@pytest.mark.parametrize(
    "text, expected",
    [
        ("first_name", "FirstName"),
        ("FIRST_NAME", "FirstName"),
        ("actionTemplate", "ActionTemplate"),
        ("Sales.Common", "SalesCommon"),
        ("ODataDemo.Model", "ODataDemoModel"),
        ("PersonGender", "PersonGender"),
        ("", ""),
    ],
)
def test_snake_to_pascal_case(text, expected):
    assert snake_to_pascal_case(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("FirstName", "first_name"),
        ("ID", "id"),
        ("CustomerID", "customer_id"),
        ("HTTPStatus2", "http_status_2"),
        ("already_snake", "already_snake"),
        ("Type", "type"),
        ("", ""),
    ],
)
def test_pascal_to_snake_case(text, expected):
    assert pascal_to_snake_case(text) == expected
