"""
Request Input Tests
"""

from wordforge.core.request import InputSource, Request


class TestRequest:
    def test_merge_priority(self):
        request = Request(
            query={"id": "query", "page": "2"},
            form={"id": "form", "name": "Form"},
            files={"id": "files", "avatar": "a.png"},
            route_params={"id": "route"},
            json={"name": "Json"},
        )

        assert request.all() == {
            "id": "route",
            "page": "2",
            "name": "Json",
            "avatar": "a.png",
        }

    def test_empty_request(self):
        assert Request().all() == {}

    def test_input(self):
        request = Request(json={"name": "Ada", "address": {"city": "London"}})

        assert request.input("name") == "Ada"
        assert request.input("address.city") == "London"
        assert request.input("address.zip", "n/a") == "n/a"
        assert request.input() == request.all()

    def test_input_keeps_none(self):
        request = Request(json={"nickname": None})

        assert request.input("nickname", "default") is None

    def test_has(self):
        request = Request(query={"a": "1"}, json={"b": {"c": 2}})

        assert request.has("a")
        assert request.has("a", "b.c")
        assert not request.has("a", "d")

    def test_only(self):
        request = Request(json={"name": "Ada", "role": "admin", "address": {"city": "London", "zip": "1"}})

        assert request.only("name", "missing") == {"name": "Ada"}
        assert request.only(["name", "address.city"]) == {
            "name": "Ada",
            "address": {"city": "London"},
        }

    def test_except(self):
        request = Request(json={"name": "Ada", "password": "secret", "token": "t"})

        assert request.except_("password", "token") == {"name": "Ada"}

    def test_constructor_copies_bags(self):
        body = {"name": "Ada"}
        request = Request(json=body)
        body["name"] = "Changed"

        assert request.input("name") == "Ada"

    def test_repr(self):
        assert repr(Request(json={"b": 1, "a": 2})) == "<Request keys=['a', 'b']>"


class TestInputSource:
    def test_request_is_input_source(self):
        assert isinstance(Request(), InputSource)

    def test_custom_source(self):
        class HeaderBag:
            def all(self):
                return {"x-token": "abc"}

        assert isinstance(HeaderBag(), InputSource)
        assert not isinstance({"a": 1}, InputSource)
