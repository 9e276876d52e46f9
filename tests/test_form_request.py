"""
Form Request Tests
"""

import pytest

from wordforge.core.request import Request
from wordforge.validation import (
    AuthorizationException,
    FormRequest,
    FormRequestState,
    Rule,
    RuleRegistry,
    ValidationException,
)


class StubFormRequest(FormRequest):
    """Form request whose definition hooks are injected."""

    def __init__(
        self,
        data,
        rules=None,
        messages=None,
        attributes=None,
        authorized=True,
        **kwargs,
    ):
        self.validation_rules = {"name": "required"} if rules is None else rules
        self.validation_messages = messages or {}
        self.validation_attributes = attributes or {}
        self.authorized = authorized
        super().__init__(Request(json=data), **kwargs)

    def authorize(self):
        return self.authorized

    def rules(self):
        return self.validation_rules

    def messages(self):
        return self.validation_messages

    def attributes(self):
        return self.validation_attributes


class AlwaysFails(Rule):
    name = "always_fails"
    invocations = []

    def passes(self, attribute, value):
        AlwaysFails.invocations.append(attribute)
        return False


@pytest.fixture
def failing_registry():
    AlwaysFails.invocations = []
    registry = RuleRegistry.with_builtins()
    registry.register("always_fails", AlwaysFails)
    return registry


class TestConstruction:
    def test_snapshots_input(self):
        form = StubFormRequest({"name": "Test User"})

        assert form.all() == {"name": "Test User"}
        assert form.input("name") == "Test User"
        assert form.state is FormRequestState.CONSTRUCTED
        assert form.validator is None

    def test_accepts_plain_mapping(self):
        class PostRequest(FormRequest):
            def rules(self):
                return {"title": "required"}

        data = {"title": "Hello"}
        form = PostRequest(data)
        data["title"] = "Changed"

        assert form.validated() == {"title": "Hello"}

    def test_input_dot_path(self):
        form = StubFormRequest({"address": {"city": "London"}})

        assert form.input("address.city") == "London"
        assert form.input("address.zip", "none") == "none"

    def test_rules_is_abstract(self):
        with pytest.raises(TypeError):
            FormRequest({})


class TestAuthorization:
    def test_authorized_request_validates(self):
        form = StubFormRequest({"name": "Test User"})

        assert form.validate() == {"name": "Test User"}
        assert form.state is FormRequestState.VALID

    def test_unauthorized_request(self):
        form = StubFormRequest({"name": "Test User"}, authorized=False)

        with pytest.raises(AuthorizationException) as exc_info:
            form.validate()

        assert str(exc_info.value) == "Unauthorized"
        assert form.state is FormRequestState.UNAUTHORIZED

    def test_unauthorized_request_never_evaluates_rules(self, failing_registry):
        form = StubFormRequest(
            {"name": "x"},
            rules={"name": "always_fails"},
            authorized=False,
            registry=failing_registry,
        )

        with pytest.raises(AuthorizationException):
            form.validated()

        assert AlwaysFails.invocations == []
        assert form.validator is None

    def test_authorization_failure_is_not_a_validation_failure(self):
        form = StubFormRequest({}, authorized=False)

        with pytest.raises(AuthorizationException):
            try:
                form.validate()
            except ValidationException:
                pytest.fail("authorization failure raised ValidationException")

    def test_default_authorize_allows(self):
        class OpenRequest(FormRequest):
            def rules(self):
                return {}

        assert OpenRequest({"a": 1}).validate() == {}

    def test_custom_authorization_exception(self):
        class Forbidden(AuthorizationException):
            pass

        class AdminRequest(StubFormRequest):
            def failed_authorization(self):
                return Forbidden("Admins only")

        with pytest.raises(Forbidden, match="Admins only"):
            AdminRequest({}, authorized=False).validate()


class TestValidation:
    def test_validation_failure(self, failing_registry):
        form = StubFormRequest(
            {"name": "x"},
            rules={"name": "always_fails"},
            registry=failing_registry,
        )

        with pytest.raises(ValidationException) as exc_info:
            form.validate()

        assert AlwaysFails.invocations == ["name"]
        assert exc_info.value.validator() is form.validator
        assert form.state is FormRequestState.INVALID

    def test_empty_name_fails(self):
        form = StubFormRequest({"name": ""})

        with pytest.raises(ValidationException) as exc_info:
            form.validate()

        assert exc_info.value.errors().has("name")

    def test_custom_messages(self):
        form = StubFormRequest(
            {"name": ""},
            messages={"name.required": "Please provide your name"},
        )

        with pytest.raises(ValidationException) as exc_info:
            form.validate()

        assert exc_info.value.errors()["name"] == ["Please provide your name"]

    def test_custom_attributes(self):
        form = StubFormRequest(
            {"first_name": ""},
            rules={"first_name": "required"},
            attributes={"first_name": "First Name"},
        )

        with pytest.raises(ValidationException) as exc_info:
            form.validate()

        assert "First Name" in exc_info.value.errors()["first_name"][0]

    def test_validated_excludes_unruled_keys(self):
        form = StubFormRequest(
            {"name": "Test User", "email": "test@example.com", "extra": "not in rules"},
            rules={"name": "required", "email": "required|email"},
        )

        validated = form.validated()

        assert validated == {"name": "Test User", "email": "test@example.com"}
        assert "extra" not in validated

    def test_gate_runs_once(self, failing_registry):
        form = StubFormRequest(
            {"name": "x"},
            rules={"name": "always_fails"},
            registry=failing_registry,
        )

        with pytest.raises(ValidationException) as first:
            form.validate()
        with pytest.raises(ValidationException) as second:
            form.validated()

        assert first.value is second.value
        assert AlwaysFails.invocations == ["name"]

    def test_validated_returns_copy(self):
        form = StubFormRequest({"name": "Ada"})

        form.validated()["name"] = "Changed"

        assert form.validated() == {"name": "Ada"}


class TestResolve:
    def test_resolve_runs_gate(self):
        class ContactRequest(FormRequest):
            def rules(self):
                return {"email": "required|email", "subject": "required|max:20"}

        request = Request(
            query={"subject": "Hi"},
            json={"email": "ada@example.com"},
            route_params={"id": "9"},
        )

        resolved = ContactRequest.resolve(request)

        assert resolved.state is FormRequestState.VALID
        assert resolved.validated() == {"email": "ada@example.com", "subject": "Hi"}

    def test_query_string_numbers(self):
        class AgeRequest(FormRequest):
            def rules(self):
                return {"age": "required|numeric|min:18|max:120", "page": "integer|min:1"}

        resolved = AgeRequest.resolve(Request(query={"age": "30", "page": "2"}))

        assert resolved.validated() == {"age": "30", "page": "2"}

        with pytest.raises(ValidationException) as exc_info:
            AgeRequest.resolve(Request(query={"age": "12"}))

        assert exc_info.value.errors() == {"age": ["The age must be at least 18."]}

    def test_validated_nested_copy(self):
        class AddressRequest(FormRequest):
            def rules(self):
                return {"address": "array"}

        form = AddressRequest({"address": {"city": "London"}})
        form.validated()["address"]["city"] = "Paris"

        assert form.validated() == {"address": {"city": "London"}}
        assert form.input("address.city") == "London"

    def test_resolve_raises(self):
        class ContactRequest(FormRequest):
            def rules(self):
                return {"email": "required|email"}

        with pytest.raises(ValidationException) as exc_info:
            ContactRequest.resolve(Request(form={"email": "nope"}))

        assert exc_info.value.errors() == {
            "email": ["The email must be a valid email address."]
        }


class TestLogging:
    def test_lifecycle_is_logged(self, log_stream):
        with pytest.raises(ValidationException):
            StubFormRequest({"name": ""}).validate()
        with pytest.raises(AuthorizationException):
            StubFormRequest({}, authorized=False).validate()
        StubFormRequest({"name": "Ada"}).validate()

        output = log_stream.getvalue()
        assert "Validation failed form=StubFormRequest fields=name" in output
        assert "Authorization denied form=StubFormRequest" in output
        assert "Validation passed form=StubFormRequest fields=1" in output
