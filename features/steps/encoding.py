import typing

from behave import use_step_matcher, when

from aptos_token_sdk.encoding import decode_str, encode_str

# Use regular expressions
use_step_matcher("re")


@when("I encode the text")
def when_encode_text(context: typing.Any):
    context.output = encode_str(context.input)


@when("I decode the result")
def when_decode_result(context: typing.Any):
    context.output = decode_str(context.output)
