"""Error Hierarchy — verifies codes, categories and the response envelope."""

import pytest

from qr_inventory.core.errors import (
    AlreadyExistsError, AlreadyLentError, ConfigMissingError, ConflictError,
    ErrorCategory, ErrorContext, NotFoundError, ParseError, QrInventoryError,
    SearchIndexError, StoreError, UnauthorizedError,
)


@pytest.mark.parametrize("error,code,category", [
    (NotFoundError("Item", "x"), "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND),
    (AlreadyLentError("i", "q"), "ALREADY_LENT", ErrorCategory.CONFLICT),
    (AlreadyExistsError("Spot", "Gym"), "ALREADY_EXISTS", ErrorCategory.CONFLICT),
    (UnauthorizedError("expired"), "UNAUTHORIZED", ErrorCategory.AUTHORIZATION),
    (ConfigMissingError("general"), "CONFIG_MISSING", ErrorCategory.CONFIGURATION),
    (StoreError("boom", "commit"), "STORE_ERROR", ErrorCategory.DATABASE),
    (SearchIndexError("boom", "upsert"), "INDEX_OUT_OF_SYNC", ErrorCategory.SEARCH_INDEX),
    (ParseError("role", "x"), "PARSE_ERROR", ErrorCategory.VALIDATION),
])
def test_codes_and_categories(error, code, category):
    assert isinstance(error, QrInventoryError)
    assert error.code == code
    assert error.category == category


def test_conflicts_share_a_base():
    assert isinstance(AlreadyLentError("i", "q"), ConflictError)
    assert isinstance(AlreadyExistsError("Item", "i"), ConflictError)


def test_search_index_error_does_not_shadow_builtin():
    assert not issubclass(SearchIndexError, IndexError)


def test_to_response_envelope():
    error = AlreadyLentError(
        "item-1", "Q1", ErrorContext(item_id="item-1", operation="lend"),
    )

    body = error.to_response()["error"]

    assert body["code"] == "ALREADY_LENT"
    assert body["category"] == "conflict"
    assert body["severity"] == "error"
    assert body["context"] == {"item_id": "item-1", "lending_id": None, "operation": "lend"}
    assert "Q1" in body["message"]
