import pickle

import pytest

from borshpy.errors import BorshError, ErrorKind


@pytest.mark.parametrize(
    ("kind", "text"),
    [
        (ErrorKind.NOT_FOUND, "entity not found"),
        (ErrorKind.PERMISSION_DENIED, "permission denied"),
        (ErrorKind.CONNECTION_REFUSED, "connection refused"),
        (ErrorKind.CONNECTION_RESET, "connection reset"),
        (ErrorKind.CONNECTION_ABORTED, "connection aborted"),
        (ErrorKind.NOT_CONNECTED, "not connected"),
        (ErrorKind.ADDR_IN_USE, "address in use"),
        (ErrorKind.ADDR_NOT_AVAILABLE, "address not available"),
        (ErrorKind.BROKEN_PIPE, "broken pipe"),
        (ErrorKind.ALREADY_EXISTS, "entity already exists"),
        (ErrorKind.WOULD_BLOCK, "operation would block"),
        (ErrorKind.INVALID_INPUT, "invalid input parameter"),
        (ErrorKind.INVALID_DATA, "invalid data"),
        (ErrorKind.TIMED_OUT, "timed out"),
        (ErrorKind.WRITE_ZERO, "write zero"),
        (ErrorKind.INTERRUPTED, "operation interrupted"),
        (ErrorKind.OTHER, "other os error"),
        (ErrorKind.UNEXPECTED_EOF, "unexpected end of file"),
    ],
)
def test_describe(kind, text):
    assert kind.describe() == text


def test_descriptions_are_distinct():
    kinds = list(ErrorKind)
    descriptions = set()
    for kind in kinds:
        descriptions.add(ErrorKind.describe(kind))
    assert len(descriptions) == len(kinds) == 18
    assert ErrorKind.UNEXPECTED_EOF.describe() in descriptions


def test_error_without_message_uses_kind_description():
    error = BorshError(ErrorKind.NOT_FOUND)
    assert str(error) == "entity not found"
    assert error.kind is ErrorKind.NOT_FOUND
    assert error.message is None


def test_error_with_message():
    error = BorshError(ErrorKind.INVALID_DATA, "Not all bytes read")
    assert str(error) == "Not all bytes read"
    assert error.kind is ErrorKind.INVALID_DATA
    assert error.message == "Not all bytes read"


def test_error_is_raised_and_caught_as_value_error():
    error = BorshError(ErrorKind.INVALID_INPUT, "Unexpected length of input")
    with pytest.raises(ValueError) as info:
        raise error
    assert info.value is error
    assert str(info.value) == "Unexpected length of input"
    assert info.value.kind is ErrorKind.INVALID_INPUT


def test_error_rejects_non_kind():
    with pytest.raises(TypeError):
        BorshError("invalid data", "oops")


def test_error_pickle_round_trip():
    error = BorshError(ErrorKind.WRITE_ZERO, "failed to write whole buffer")
    restored = pickle.loads(pickle.dumps(error))
    assert restored.kind is ErrorKind.WRITE_ZERO
    assert str(restored) == "failed to write whole buffer"


def test_error_pickle_round_trip_without_message():
    restored = pickle.loads(pickle.dumps(BorshError(ErrorKind.OTHER)))
    assert restored.message is None
    assert str(restored) == "other os error"


def test_repr_mentions_kind_and_message():
    error = BorshError(ErrorKind.INVALID_DATA, "formatter error")
    assert repr(error) == "BorshError(INVALID_DATA, 'formatter error')"
    assert repr(BorshError(ErrorKind.TIMED_OUT)) == "BorshError(TIMED_OUT)"