import typing

from behave import then, use_step_matcher, when

from aptos_token_sdk.account_address import AccountAddress, ParseAddressError

# Use regular expressions
use_step_matcher("re")


@when("I parse the account address")
def when_parse_account_address(context: typing.Any):
    try:
        context.output = AccountAddress.from_str_relaxed(context.input)
    except ParseAddressError as e:
        context.output = e


@when("I strictly parse the account address")
def when_strictly_parse_account_address(context: typing.Any):
    try:
        context.output = AccountAddress.from_str(context.input)
    except ParseAddressError as e:
        context.output = e


@when("I convert the address to a string")
def when_account_address_to_string(context: typing.Any):
    context.output = str(context.output)


@then("I should fail to parse the account address")
def then_fail_account_address(context: typing.Any):
    assert isinstance(context.output, ParseAddressError)
