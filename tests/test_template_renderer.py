from datetime import date
from decimal import Decimal

from modules.contracts.services.template_renderer import (
    find_placeholders,
    format_currency,
    format_date,
    render_template,
    unresolved_placeholders,
)


FIELDS = {
    "client_name": "Jane Doe",
    "project_name": "Kitchen Remodel",
    "total_amount": Decimal("50000"),
    "start_date": date(2026, 1, 5),
}


def test_render_is_deterministic():
    content = "{{CLIENT_NAME}} / [PROJECT_NAME] / {{TOTAL_AMOUNT}}"
    assert render_template(content, FIELDS) == render_template(content, FIELDS)


def test_both_placeholder_styles_render_the_same_field():
    rendered = render_template("{{CLIENT_NAME}} and [CLIENT_NAME]", FIELDS)
    assert rendered == "Jane Doe and Jane Doe"


def test_aliases_share_one_value():
    rendered = render_template("[CUSTOMER_NAME] [OWNER_NAME] {{CLIENT_NAME}}", FIELDS)
    assert rendered == "Jane Doe Jane Doe Jane Doe"


def test_total_amount_is_formatted_as_currency():
    rendered = render_template("Total: {{TOTAL_AMOUNT}}", FIELDS)
    assert "Total: $50,000" in rendered
    assert rendered == "Total: $50,000.00"


def test_dates_use_long_format():
    assert render_template("Starts [START_DATE]", FIELDS) == "Starts January 5, 2026"


def test_unknown_placeholders_are_left_untouched():
    content = "Permit {{PERMIT_NUMBER}} for [PROJECT_NAME]"
    assert render_template(content, FIELDS) == "Permit {{PERMIT_NUMBER}} for Kitchen Remodel"


def test_missing_values_fall_back_to_defaults():
    rendered = render_template("[CLIENT_ADDRESS] / {{PAYMENT_TERMS}}", {})
    assert rendered == "[Address] / [Payment Terms]"


def test_values_are_not_rendered_again():
    fields = dict(FIELDS, client_name="{{PROJECT_NAME}}")
    assert render_template("Client: {{CLIENT_NAME}}", fields) == "Client: {{PROJECT_NAME}}"


def test_extra_fields_become_placeholders():
    rendered = render_template("Permit {{PERMIT_NUMBER}}", {"permit_number": "P-42"})
    assert rendered == "Permit P-42"


def test_empty_content_renders_empty():
    assert render_template("", FIELDS) == ""


def test_find_placeholders_in_order_of_appearance():
    content = "[PROJECT_NAME] {{CLIENT_NAME}} [PROJECT_NAME] {{PERMIT_NUMBER}}"
    assert find_placeholders(content) == ["PROJECT_NAME", "CLIENT_NAME", "PERMIT_NUMBER"]


def test_unresolved_placeholders_report_unknown_names():
    content = "{{CLIENT_NAME}} {{PERMIT_NUMBER}} [INSPECTOR]"
    assert unresolved_placeholders(content) == ["PERMIT_NUMBER", "INSPECTOR"]
    assert unresolved_placeholders(content, ["permit_number"]) == ["INSPECTOR"]


def test_formatters():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency("$10k") == "$10k"
    assert format_date("2026-03-31") == "March 31, 2026"
    assert format_date("next spring") == "next spring"


def test_numeric_string_amount_is_formatted_as_currency():
    assert render_template("Total: {{TOTAL_AMOUNT}}", {"total_amount": "50000"}) == "Total: $50,000.00"
    assert format_currency("$50,000") == "$50,000.00"
    assert format_currency(" 1234.5 ") == "$1,234.50"


def test_values_keyed_by_placeholder_name():
    content = "Hi {{CLIENT_NAME}}, total {{TOTAL_AMOUNT}}"
    fields = {"CLIENT_NAME": "Jane", "TOTAL_AMOUNT": "50000"}
    assert render_template(content, fields) == "Hi Jane, total $50,000.00"
    assert unresolved_placeholders(content, fields.keys()) == []


def test_values_keyed_by_any_alias_in_any_case():
    rendered = render_template("[CLIENT_NAME] / [SCOPE_OF_WORK]", {"customer_name": "Jane", "Scope": "Decking"})
    assert rendered == "Jane / Decking"


def test_logical_field_name_wins_over_alias():
    fields = {"OWNER_NAME": "Owner", "client_name": "Jane Doe"}
    assert render_template("{{CLIENT_NAME}}", fields) == "Jane Doe"


def test_project_location_and_owner_email_aliases():
    fields = {"project_name": "Kitchen Remodel", "client_email": "jane@example.com"}
    rendered = render_template("[PROJECT_LOCATION] {{OWNER_EMAIL}}", fields)
    assert rendered == "Kitchen Remodel jane@example.com"
