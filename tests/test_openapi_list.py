import json

import pytest

from gptkit.openapi_list import NO_FILTER, Operation, is_openapi, list_operations, match_filters

OPENAPI_V2_YAML = """\
swagger: "2.0"
info:
  title: Pets
  version: 1.0.0
host: petstore.example.com
basePath: /v1
paths:
  /pets:
    get:
      operationId: listPets
      summary: List all pets
      responses:
        "200":
          description: ok
    post:
      operationId: createPets
      summary: Create a pet
      responses:
        "201":
          description: created
  /pets/{petId}:
    get:
      operationId: showPetById
      summary: Info for a pet
      parameters:
        - name: petId
          in: path
          required: true
          type: string
      responses:
        "200":
          description: ok
"""

OPENAPI_V3_YAML = """\
openapi: "3.0.0"
info:
  title: Pets
  version: 1.0.0
servers:
  - url: https://petstore.example.com/v1
paths:
  /pets:
    get:
      operationId: listPets
      summary: List all pets
      responses:
        "200":
          description: ok
    post:
      operationId: createPets
      summary: Create a pet
      responses:
        "201":
          description: created
  /pets/{petId}:
    get:
      operationId: showPetById
      summary: Info for a pet
      description: Shows one pet
      responses:
        "200":
          description: ok
"""

OPENAPI_V2_JSON = json.dumps(
    {
        "swagger": "2.0",
        "info": {"title": "Pets", "version": "1.0.0"},
        "host": "petstore.example.com",
        "paths": {
            "/pets": {
                "get": {"operationId": "listPets", "responses": {"200": {"description": "ok"}}},
                "post": {"operationId": "createPets", "responses": {"201": {"description": "created"}}},
            }
        },
    }
).encode()

DOCUMENT = {
    "openapi": "3.0.0",
    "paths": {
        "/users": {
            "get": {"operationId": "listUsers", "summary": "List users", "description": "All users"},
            "post": {"operationId": "createUser", "summary": "Create user"},
            "parameters": [],
        },
        "/users/{id}": {"get": {"operationId": "getUser"}},
    },
}


def test_is_openapi_v2_yaml():
    assert is_openapi(OPENAPI_V2_YAML.encode()) == 2


def test_is_openapi_v2_json():
    assert is_openapi(OPENAPI_V2_JSON) == 2


def test_is_openapi_v3_yaml():
    assert is_openapi(OPENAPI_V3_YAML) == 3


def test_is_openapi_unquoted_yaml_version():
    assert is_openapi("swagger: 2.0\npaths:\n  /a:\n    get: {}\n") == 2


@pytest.mark.parametrize(
    "data",
    [
        b"openapi: 3.0.0\ninfo: {}\n",
        b'{"openapi": "3.0.0", "paths": {}}',
        b"just some text",
        b"name: tool\n\nsay hello",
        b"openapi: x.0\npaths:\n  /a: {}\n",
        b"paths:\n  /a: {}\n",
        b"[1, 2, 3]",
        b"",
    ],
)
def test_is_openapi_rejects(data):
    assert is_openapi(data) == 0


def test_list_all_operations():
    ops = list_operations(DOCUMENT, "")
    assert set(ops) == {"listUsers", "createUser", "getUser"}
    assert ops["listUsers"] == Operation(description="All users", summary="List users")
    assert list_operations(DOCUMENT, NO_FILTER) == ops


def test_list_exact_filter():
    assert list(list_operations(DOCUMENT, "getUser")) == ["getUser"]
    assert list_operations(DOCUMENT, "missing") == {}


def test_list_glob_filters():
    ops = list_operations(DOCUMENT, "list*|create*")
    assert set(ops) == {"listUsers", "createUser"}


def test_list_bad_pattern_raises():
    with pytest.raises(ValueError):
        list_operations(DOCUMENT, "[*")


def test_match_filters_basics():
    assert match_filters(["get*"], "getUser") is True
    assert match_filters(["get*", "list?sers"], "listUsers") is True
    assert match_filters(["post*"], "getUser") is False
    assert match_filters(["*"], "a/b") is False
    assert match_filters(["[a-c]at"], "bat") is True
    assert match_filters(["[^a-c]at"], "bat") is False


@pytest.mark.parametrize("pattern", ["[", "[]", "a\\", "[z-a]"])
def test_match_filters_bad_pattern(pattern):
    with pytest.raises(ValueError):
        match_filters([pattern], "anything")