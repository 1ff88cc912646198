import pytest

from oas_validator.callout import DictMessageContext, ExecutionResult, ValidatorCallout


def _request(**variables):
    base = {"request.path": "/v1/items/42", "request.verb": "GET"}
    base.update(variables)
    return base


class TestValidatorCallout:
    def test_valid_request(self, cache):
        ctx = DictMessageContext(_request(**{"request.header.x-api-key": "k"}))
        result = ValidatorCallout({"spec": "items.yaml"}, cache=cache).execute(ctx)
        assert result == ExecutionResult.SUCCESS
        assert ctx.get_variable("oas_valid") is True
        assert ctx.get_variable("oas_error") is None

    def test_invalid_request_aborts(self, cache):
        ctx = DictMessageContext(_request())
        result = ValidatorCallout({"spec": "items.yaml"}, cache=cache).execute(ctx)
        assert result == ExecutionResult.ABORT
        assert ctx.get_variable("oas_valid") is False
        assert ctx.get_variable("oas_error") == "invalid parameters"
        assert "header:x-api-key" in ctx.get_variable("oas_error_detail")

    @pytest.mark.parametrize("suppress, variables", [("true", {}), ("{flow.suppress}", {"flow.suppress": "TRUE"})])
    def test_suppress_fault(self, cache, suppress, variables):
        ctx = DictMessageContext(_request(**variables))
        callout = ValidatorCallout({"spec": "items.yaml", "suppress-fault": suppress}, cache=cache)
        assert callout.execute(ctx) == ExecutionResult.SUCCESS
        assert ctx.get_variable("oas_valid") is False
        assert ctx.get_variable("oas_error") == "invalid parameters"

    def test_stale_results_are_cleared(self, cache):
        ctx = DictMessageContext(_request(**{"request.header.x-api-key": "k", "oas_error": "invalid path"}))
        ValidatorCallout({"spec": "items.yaml"}, cache=cache).execute(ctx)
        assert ctx.get_variable("oas_error") is None

    def test_spec_from_context_variable(self, cache):
        ctx = DictMessageContext(_request(**{"request.header.x-api-key": "k", "apiproxy.spec": "items.yaml"}))
        result = ValidatorCallout({"spec": "{apiproxy.spec}"}, cache=cache).execute(ctx)
        assert result == ExecutionResult.SUCCESS

    def test_inline_json_is_not_a_variable_reference(self, cache):
        spec = '{"swagger":"2.0","paths":{"/a":{"get":{"responses":{}}}}}'
        ctx = DictMessageContext({"request.path": "/a", "request.verb": "GET"})
        assert ValidatorCallout({"spec": spec}, cache=cache).execute(ctx) == ExecutionResult.SUCCESS

    def test_base_path_check(self, cache):
        ctx = DictMessageContext(_request(**{"proxy.basepath": "/v2"}))
        callout = ValidatorCallout({"spec": "items.yaml", "validate-basepath": "true"}, cache=cache)
        assert callout.execute(ctx) == ExecutionResult.ABORT
        assert ctx.get_variable("oas_error") == "invalid basepath"

    def test_post_body(self, cache):
        ctx = DictMessageContext(
            _request(
                **{
                    "request.path": "/v1/items",
                    "request.verb": "POST",
                    "request.header.x-api-key": "k",
                    "request.header.content-type": "application/json",
                }
            ),
            content=b'{"name": "widget"}',
        )
        assert ValidatorCallout({"spec": "items.yaml"}, cache=cache).execute(ctx) == ExecutionResult.SUCCESS


class TestCalloutErrors:
    @pytest.mark.parametrize(
        "properties, message",
        [
            ({}, "spec is not specified"),
            ({"spec": "   "}, "spec is empty"),
            ({"spec": "{missing.var}"}, "spec resolves to an empty string"),
        ],
    )
    def test_bad_spec_property(self, cache, properties, message):
        ctx = DictMessageContext(_request())
        assert ValidatorCallout(properties, cache=cache).execute(ctx) == ExecutionResult.ABORT
        assert ctx.get_variable("oas_error") == message
        assert ctx.get_variable("oas_success") is False
        assert "ValueError" in ctx.get_variable("oas_stacktrace")

    def test_load_failure(self, cache):
        ctx = DictMessageContext(_request())
        assert ValidatorCallout({"spec": "nope.yaml"}, cache=cache).execute(ctx) == ExecutionResult.ABORT
        assert ctx.get_variable("oas_exception").startswith("SpecResolutionError")

    def test_load_failure_suppressed(self, cache):
        ctx = DictMessageContext(_request())
        callout = ValidatorCallout({"spec": "nope.yaml", "suppress-fault": "true", "debug": "true"}, cache=cache)
        assert callout.execute(ctx) == ExecutionResult.SUCCESS
        assert ctx.get_variable("oas_specName") == "nope.yaml"
