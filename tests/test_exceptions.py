from shorts_service.exceptions import (
    ShortsServiceError,
    UnregisteredMessageError,
    DuplicateHandlerError,
    RegistryFrozenError,
    ValidationError,
    NotFoundError,
    ConflictError,
)


def test_base_exception():
    exc = ShortsServiceError("base error")
    assert str(exc) == "base error"


def test_all_errors_share_base():
    for exc_type in (
        UnregisteredMessageError,
        DuplicateHandlerError,
        RegistryFrozenError,
        ValidationError,
        NotFoundError,
        ConflictError,
    ):
        assert issubclass(exc_type, ShortsServiceError)


def test_unregistered_message_error():
    class MyMsg:
        pass

    exc = UnregisteredMessageError(MyMsg)
    assert str(exc) == "No handler registered for MyMsg"
    assert exc.message_type == MyMsg


def test_duplicate_handler_error():
    class MyMsg:
        pass

    class FirstHandler:
        pass

    class SecondHandler:
        pass

    first, second = FirstHandler(), SecondHandler()
    exc = DuplicateHandlerError(MyMsg, first, second)

    assert exc.message_type == MyMsg
    assert exc.existing is first
    assert exc.rejected is second
    assert "FirstHandler" in str(exc)
    assert "SecondHandler" in str(exc)


def test_registry_frozen_error():
    class MyMsg:
        pass

    exc = RegistryFrozenError(MyMsg)
    assert "MyMsg" in str(exc)
    assert "frozen" in str(exc)


def test_validation_error():
    errors = {"media": ["required"]}
    exc = ValidationError("CreateShortCommand", errors)
    assert "Validation failed for CreateShortCommand" in str(exc)

    data = exc.to_dict()
    assert data["error"] == "validation_error"
    assert data["message_type"] == "CreateShortCommand"
    assert data["errors"] == errors


def test_not_found_error():
    exc = NotFoundError("Short", "abc")
    assert str(exc) == "Short with ID 'abc' not found"
    assert exc.entity_type == "Short"
    assert exc.entity_id == "abc"


def test_not_found_error_composite_key():
    exc = NotFoundError("Report", ("s1", "u1"))
    assert exc.entity_id == ("s1", "u1")
    assert "('s1', 'u1')" in str(exc)


def test_conflict_error():
    exc = ConflictError("Report", ("s1", "u1"))
    assert exc.entity_type == "Report"
    assert exc.key == ("s1", "u1")
    assert "already exists" in str(exc)
