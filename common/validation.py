import typing

# NOTE: Type problems always raise TypeError. Range problems raise errorType
# which defaults to ValueError but can be set to a more specific ValueError
# derived exception so callers see their own domain error.

def _checkRange(
        name: str,
        value: typing.Union[int, float],
        min: typing.Optional[typing.Union[int, float]],
        max: typing.Optional[typing.Union[int, float]],
        errorType: typing.Type[Exception]
        ) -> None:
    if min is not None and max is not None and (value < min or value > max):
        raise errorType(f'{name} must be in the range {min} to {max}')
    elif min is not None and value < min:
        raise errorType(f'{name} must be >= {min}')
    elif max is not None and value > max:
        raise errorType(f'{name} must be <= {max}')

def validateMandatoryBool(
        name: str,
        value: bool
        ) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f'{name} must be a bool')
    return value

def validateMandatoryInt(
        name: str,
        value: int,
        min: typing.Optional[int] = None,
        max: typing.Optional[int] = None,
        errorType: typing.Type[Exception] = ValueError
        ) -> int:
    # bool is a subclass of int but passing one is almost certainly a bug
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f'{name} must be an int')

    _checkRange(name=name, value=value, min=min, max=max, errorType=errorType)
    return value

def validateMandatoryFloat(
        name: str,
        value: typing.Union[int, float],
        min: typing.Optional[typing.Union[int, float]] = None,
        max: typing.Optional[typing.Union[int, float]] = None,
        errorType: typing.Type[Exception] = ValueError
        ) -> typing.Union[int, float]:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise TypeError(f'{name} must be an int or float')

    _checkRange(name=name, value=value, min=min, max=max, errorType=errorType)
    return value

def validateMandatoryStr(
        name: str,
        value: str,
        allowed: typing.Optional[typing.Collection[str]] = None,
        allowEmpty = True,
        errorType: typing.Type[Exception] = ValueError
        ) -> str:
    if not isinstance(value, str):
        raise TypeError(f'{name} must be a str')

    if not allowEmpty and not len(value):
        raise errorType(f'{name} can\'t be empty')

    if allowed is not None and value not in allowed:
        raise errorType(f'{name} must be one of [{", ".join(allowed)}]')

    return value

T = typing.TypeVar("T")
def validateMandatoryCollection(
        name: str,
        value: typing.Collection[T],
        type: typing.Optional[typing.Union[typing.Type[T], typing.Tuple[typing.Type[T], ...]]] = None,
        allowEmpty: bool = True,
        errorType: typing.Type[Exception] = ValueError
        ) -> typing.Collection[T]:
    # A str is a collection of str but is never what's wanted here
    if isinstance(value, str) or not isinstance(value, typing.Collection):
        raise TypeError(f'{name} must be a collection')

    if not allowEmpty and not len(value):
        raise errorType(f'{name} can\'t be empty')

    for obj in value:
        if obj is None:
            raise errorType(f'{name} can\'t contain None')
        if type is not None and not isinstance(obj, type):
            raise TypeError(f'{name} must contain objects of type {type}')

    return value
