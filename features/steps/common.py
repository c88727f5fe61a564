import typing

from behave import given, then, use_step_matcher

# Use regular expressions
use_step_matcher("re")


@given(r'text "(?P<input_value>.*)"')
def given_text(context: typing.Any, input_value: str):
    context.input = input_value


@then(r'the result should be text "(?P<expected_value>.*)"')
def then_result_text(context: typing.Any, expected_value: str):
    assert context.output == expected_value, (
        "Expected " + expected_value + " but got " + str(context.output)
    )


@then(r"the result should be hex (?P<expected_value>[0-9a-fA-F]*)")
def then_result_hex(context: typing.Any, expected_value: str):
    assert context.output == parse_hex(expected_value).hex(), (
        "Expected " + expected_value + " but got " + str(context.output)
    )


def parse_hex(input_value: str):
    return bytes.fromhex(input_value.removeprefix("0x"))
