import common
import logging
import math
import packaging
import packaging.version
import threading
import typing

# A calculation is a value along with the (optional) named inputs and
# functions that produced it. Every number the trading logic produces is
# built from calculations so the full working can be shown to the GM and
# written to the audit log.

class CalculatorFunction(object):
    def value(self) -> typing.Union[int, float]:
        raise RuntimeError('The value method should be overridden by derived classes')

    def calculationString(self, outerBrackets: bool, decimalPlaces: int = 2) -> str:
        raise RuntimeError('The calculationString method should be overridden by derived classes')

    def calculations(self) -> typing.List['ScalarCalculation']:
        raise RuntimeError('The calculations method should be overridden by derived classes')

    def copy(self) -> typing.Any:
        raise RuntimeError('The copy method should be overridden by derived classes')

    @staticmethod
    def serialisationType() -> str:
        raise RuntimeError('The static serialisationType method should be overridden by derived classes')

    def toJson(self) -> typing.Mapping[str, typing.Any]:
        raise RuntimeError('The toJson method should be overridden by derived classes')

    @staticmethod
    def fromJson(jsonData: typing.Mapping[str, typing.Any]) -> 'CalculatorFunction':
        raise RuntimeError('The static fromJson method should be overridden by derived classes')

# IMPORTANT: To avoid weird bugs the value of a ScalarCalculation should never be
# allowed to change after it's constructed
class ScalarCalculation(object):
    def __init__(
            self,
            value: typing.Union[int, float, CalculatorFunction, 'ScalarCalculation'],
            name: typing.Optional[str] = None
            ) -> None:
        if isinstance(value, ScalarCalculation):
            self._value = value._value
            self._function = value._function
        elif isinstance(value, CalculatorFunction):
            self._value = value.value()
            self._function = value
        else:
            assert(isinstance(value, (int, float)))
            self._value = value
            self._function = None
        self._name = name

    def value(self) -> typing.Union[int, float]:
        return self._value

    def function(self) -> typing.Optional[CalculatorFunction]:
        return self._function

    def name(self, forCalculation=False) -> typing.Optional[str]:
        if not self._name:
            return None

        if forCalculation:
            return '<' + self._name + '>'

        return self._name

    def calculationString(
            self,
            outerBrackets: bool,
            decimalPlaces: int = 2
            ) -> str:
        if not self._function:
            return common.formatNumber(
                number=self._value,
                thousandsSeparator=False,
                decimalPlaces=decimalPlaces)

        return self._function.calculationString(
            outerBrackets=outerBrackets,
            decimalPlaces=decimalPlaces)

    def subCalculations(self) -> typing.List['ScalarCalculation']:
        if not self._function:
            return []
        return self._function.calculations()

    def copy(self) -> 'ScalarCalculation':
        return ScalarCalculation(
            value=self._function.copy() if self._function else self._value,
            name=self._name)

    # Flattened list of every named calculation that contributed to this one,
    # deepest first. Used when writing a human readable explanation
    def namedHierarchy(self) -> typing.List['ScalarCalculation']:
        result = []
        for calculation in self.subCalculations():
            result.extend(calculation.namedHierarchy())
            result.append(calculation)
        return result

def _operandString(
        operand: ScalarCalculation,
        outerBrackets: bool,
        decimalPlaces: int
        ) -> str:
    operandString = operand.name(forCalculation=True)
    if not operandString:
        operandString = operand.calculationString(
            outerBrackets=outerBrackets,
            decimalPlaces=decimalPlaces)
    return operandString

def _operandCalculations(operand: ScalarCalculation) -> typing.List[ScalarCalculation]:
    if operand.name():
        return [operand]
    return operand.subCalculations()

class Calculator(object):
    class SingleParameterFunction(CalculatorFunction):
        # Wrapper used in calculation strings, e.g. RoundedDown(...)
        _Label = None

        def __init__(
                self,
                value: ScalarCalculation
                ) -> None:
            self._value = value

        def calculationString(
                self,
                outerBrackets: bool,
                decimalPlaces: int = 2
                ) -> str:
            valueString = _operandString(
                operand=self._value,
                outerBrackets=False,
                decimalPlaces=decimalPlaces)
            if not self._Label:
                return valueString

            numericValue = self._value.value()
            if isinstance(numericValue, int) or numericValue.is_integer():
                # No rounding needed so just use the value string to simplify the string
                return valueString
            return f'{self._Label}({valueString})'

        def calculations(self) -> typing.List[ScalarCalculation]:
            return _operandCalculations(self._value)

        def copy(self) -> 'Calculator.SingleParameterFunction':
            return type(self)(self._value.copy())

        def toJson(self) -> typing.Mapping[str, typing.Any]:
            return {'value': serialiseCalculation(self._value, includeVersion=False)}

        @classmethod
        def fromJson(
            cls,
            jsonData: typing.Mapping[str, typing.Any]
            ) -> 'Calculator.SingleParameterFunction':
            value = jsonData.get('value')
            if value is None:
                raise RuntimeError(f'{cls.serialisationType().capitalize()} function is missing the value property')
            return cls(deserialiseCalculation(jsonData=value))

    class TwoParameterFunction(CalculatorFunction):
        # Infix operators are written "lhs op rhs", anything else is written as
        # a function call "Op(lhs, rhs)"
        _Operator = None
        _Label = None

        def __init__(
                self,
                lhs: ScalarCalculation,
                rhs: ScalarCalculation
                ) -> None:
            self._lhs = lhs
            self._rhs = rhs

        def calculationString(
                self,
                outerBrackets: bool,
                decimalPlaces: int = 2
                ) -> str:
            if self._Label:
                lhsString = _operandString(self._lhs, outerBrackets=False, decimalPlaces=decimalPlaces)
                rhsString = _operandString(self._rhs, outerBrackets=False, decimalPlaces=decimalPlaces)
                return f'{self._Label}({lhsString}, {rhsString})'

            lhsString = _operandString(self._lhs, outerBrackets=True, decimalPlaces=decimalPlaces)
            rhsString = _operandString(self._rhs, outerBrackets=True, decimalPlaces=decimalPlaces)
            calculationString = f'{lhsString} {self._Operator} {rhsString}'
            if outerBrackets:
                calculationString = '(' + calculationString + ')'
            return calculationString

        def calculations(self) -> typing.List[ScalarCalculation]:
            return _operandCalculations(self._lhs) + _operandCalculations(self._rhs)

        def copy(self) -> 'Calculator.TwoParameterFunction':
            return type(self)(self._lhs.copy(), self._rhs.copy())

        def toJson(self) -> typing.Mapping[str, typing.Any]:
            return {
                'lhs': serialiseCalculation(self._lhs, includeVersion=False),
                'rhs': serialiseCalculation(self._rhs, includeVersion=False)}

        @classmethod
        def fromJson(
            cls,
            jsonData: typing.Mapping[str, typing.Any]
            ) -> 'Calculator.TwoParameterFunction':
            lhs = jsonData.get('lhs')
            if lhs is None:
                raise RuntimeError(f'{cls.serialisationType().capitalize()} function is missing the lhs property')
            rhs = jsonData.get('rhs')
            if rhs is None:
                raise RuntimeError(f'{cls.serialisationType().capitalize()} function is missing the rhs property')
            return cls(
                deserialiseCalculation(jsonData=lhs),
                deserialiseCalculation(jsonData=rhs))

    class EqualsFunction(SingleParameterFunction):
        def value(self) -> typing.Union[int, float]:
            return self._value.value()

        @staticmethod
        def serialisationType() -> str:
            return 'equals'

    class FloorFunction(SingleParameterFunction):
        _Label = 'RoundedDown'

        def value(self) -> typing.Union[int, float]:
            return math.floor(self._value.value())

        @staticmethod
        def serialisationType() -> str:
            return 'floor'

    class CeilFunction(SingleParameterFunction):
        _Label = 'RoundedUp'

        def value(self) -> typing.Union[int, float]:
            return math.ceil(self._value.value())

        @staticmethod
        def serialisationType() -> str:
            return 'ceil'

    class RoundFunction(SingleParameterFunction):
        _Label = 'Rounded'

        def value(self) -> typing.Union[int, float]:
            return common.roundHalfUp(self._value.value())

        @staticmethod
        def serialisationType() -> str:
            return 'round'

    class AddFunction(TwoParameterFunction):
        _Operator = '+'

        def value(self) -> typing.Union[int, float]:
            return self._lhs.value() + self._rhs.value()

        @staticmethod
        def serialisationType() -> str:
            return 'add'

    class SubtractFunction(TwoParameterFunction):
        _Operator = '-'

        def value(self) -> typing.Union[int, float]:
            return self._lhs.value() - self._rhs.value()

        @staticmethod
        def serialisationType() -> str:
            return 'subtract'

    class MultiplyFunction(TwoParameterFunction):
        _Operator = '*'

        def value(self) -> typing.Union[int, float]:
            return self._lhs.value() * self._rhs.value()

        @staticmethod
        def serialisationType() -> str:
            return 'multiply'

    class DivideFloatFunction(TwoParameterFunction):
        _Operator = '/'

        def value(self) -> typing.Union[int, float]:
            try:
                return self._lhs.value() / self._rhs.value()
            except ZeroDivisionError:
                lhs = self._lhs.value()
                if lhs > 0:
                    return float('inf')
                if lhs < 0:
                    return float('-inf')
                return 0.0

        @staticmethod
        def serialisationType() -> str:
            return 'dividefloat'

    class MinFunction(TwoParameterFunction):
        _Label = 'Minimum'

        def value(self) -> typing.Union[int, float]:
            return min(self._lhs.value(), self._rhs.value())

        @staticmethod
        def serialisationType() -> str:
            return 'min'

    class MaxFunction(TwoParameterFunction):
        _Label = 'Maximum'

        def value(self) -> typing.Union[int, float]:
            return max(self._lhs.value(), self._rhs.value())

        @staticmethod
        def serialisationType() -> str:
            return 'max'

    # NOTE: The percentage is signed so a -10% modifier reduces the value. The
    # result is value * (1 + percentage / 100)
    class ApplyPercentageFunction(TwoParameterFunction):
        def value(self) -> typing.Union[int, float]:
            return self._lhs.value() * (1.0 + (self._rhs.value() / 100))

        def calculationString(
                self,
                outerBrackets: bool,
                decimalPlaces: int = 2
                ) -> str:
            lhsString = _operandString(self._lhs, outerBrackets=True, decimalPlaces=decimalPlaces)
            rhsString = _operandString(self._rhs, outerBrackets=True, decimalPlaces=decimalPlaces)
            calculationString = f'{lhsString} + {rhsString}%'
            if outerBrackets:
                calculationString = '(' + calculationString + ')'
            return calculationString

        @staticmethod
        def serialisationType() -> str:
            return 'applypercent'

    class SumFunction(CalculatorFunction):
        def __init__(
                self,
                values: typing.Sequence[ScalarCalculation]
                ) -> None:
            self._values = list(values)

        def value(self) -> typing.Union[int, float]:
            total = 0
            for value in self._values:
                total += value.value()
            return total

        def calculationString(
                self,
                outerBrackets: bool,
                decimalPlaces: int = 2
                ) -> str:
            if not self._values:
                return common.formatNumber(
                    number=0,
                    decimalPlaces=decimalPlaces)

            multiple = len(self._values) > 1
            resultString = ' + '.join([_operandString(
                operand=value,
                outerBrackets=True if multiple else outerBrackets,
                decimalPlaces=decimalPlaces) for value in self._values])
            if outerBrackets and multiple:
                resultString = '(' + resultString + ')'
            return resultString

        def calculations(self) -> typing.List[ScalarCalculation]:
            calculations = []
            for value in self._values:
                calculations.extend(_operandCalculations(value))
            return calculations

        def copy(self) -> 'Calculator.SumFunction':
            return Calculator.SumFunction(values=[v.copy() for v in self._values])

        @staticmethod
        def serialisationType() -> str:
            return 'sum'

        def toJson(self) -> typing.Mapping[str, typing.Any]:
            return {'values': [serialiseCalculation(v, includeVersion=False) for v in self._values]}

        @staticmethod
        def fromJson(
            jsonData: typing.Mapping[str, typing.Any]
            ) -> 'Calculator.SumFunction':
            jsonValues = jsonData.get('values')
            if jsonValues is None:
                raise RuntimeError('Sum function is missing the values property')
            if not isinstance(jsonValues, list):
                raise RuntimeError('Sum function values property is not a list')
            return Calculator.SumFunction(
                values=[deserialiseCalculation(jsonData=v) for v in jsonValues])

    @staticmethod
    def equals(
            value: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.EqualsFunction(value),
            name=name)

    @staticmethod
    def add(
            lhs: ScalarCalculation,
            rhs: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.AddFunction(lhs, rhs),
            name=name)

    @staticmethod
    def subtract(
            lhs: ScalarCalculation,
            rhs: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.SubtractFunction(lhs, rhs),
            name=name)

    @staticmethod
    def multiply(
            lhs: ScalarCalculation,
            rhs: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.MultiplyFunction(lhs, rhs),
            name=name)

    @staticmethod
    def divideFloat(
            lhs: ScalarCalculation,
            rhs: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.DivideFloatFunction(lhs, rhs),
            name=name)

    @staticmethod
    def sum(
            values: typing.Sequence[ScalarCalculation],
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.SumFunction(values),
            name=name)

    @staticmethod
    def floor(
            value: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.FloorFunction(value),
            name=name)

    @staticmethod
    def ceil(
            value: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.CeilFunction(value),
            name=name)

    @staticmethod
    def round(
            value: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.RoundFunction(value),
            name=name)

    @staticmethod
    def min(
            lhs: ScalarCalculation,
            rhs: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.MinFunction(lhs, rhs),
            name=name)

    @staticmethod
    def max(
            lhs: ScalarCalculation,
            rhs: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.MaxFunction(lhs, rhs),
            name=name)

    @staticmethod
    def clamp(
            value: ScalarCalculation,
            minValue: ScalarCalculation,
            maxValue: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return Calculator.max(
            lhs=minValue,
            rhs=Calculator.min(lhs=value, rhs=maxValue),
            name=name)

    @staticmethod
    def applyPercentage(
            value: ScalarCalculation,
            percentage: ScalarCalculation,
            name: typing.Optional[str] = None
            ) -> ScalarCalculation:
        return ScalarCalculation(
            value=Calculator.ApplyPercentageFunction(value, percentage),
            name=name)

#
# Serialisation
#
class _FunctionSerialiser(object):
    _instance = None # Singleton instance
    _lock = threading.Lock()
    _FunctionTypeMap: typing.Optional[typing.Dict[str, typing.Type[CalculatorFunction]]] = None

    def __init__(self) -> None:
        raise RuntimeError('Call instance() instead')

    @classmethod
    def instance(cls):
        if not cls._instance:
            with cls._lock:
                # Recheck instance as another thread could have created it between the
                # first check and the lock
                if not cls._instance:
                    cls._instance = cls.__new__(cls)
                    cls._instance._findFunctions()
        return cls._instance

    def serialise(
            self,
            function: CalculatorFunction
            ) -> typing.Mapping[str, typing.Any]:
        return {
            'type': function.serialisationType(),
            'values': function.toJson()}

    def deserialise(
            self,
            jsonData: typing.Mapping[str, typing.Any]
            ) -> CalculatorFunction:
        type = jsonData.get('type')
        if type is None:
            raise RuntimeError('Calculation function is missing the type property')
        values = jsonData.get('values')
        if values is None:
            raise RuntimeError('Calculation function is missing the values property')

        cls = _FunctionSerialiser._FunctionTypeMap.get(type)
        if cls is None:
            raise RuntimeError(f'Calculation function has unknown type {type}')

        return cls.fromJson(jsonData=values)

    def _findFunctions(self) -> None:
        if _FunctionSerialiser._FunctionTypeMap is None:
            _FunctionSerialiser._FunctionTypeMap = {}
            for cls in common.getSubclasses(classType=CalculatorFunction):
                _FunctionSerialiser._FunctionTypeMap[cls.serialisationType()] = cls

_CalculationVersion = packaging.version.Version('1.0')

def serialiseCalculation(
        calculation: ScalarCalculation,
        includeVersion: bool = True,
        includeHierarchy: bool = True
        ) -> typing.Mapping[str, typing.Any]:
    if not isinstance(calculation, ScalarCalculation):
        raise ValueError(f'Unable to serialise unknown calculation type {type(calculation)}')

    jsonData = {}
    if includeVersion:
        jsonData['version'] = str(_CalculationVersion)

    if calculation.name():
        jsonData['name'] = calculation.name()

    jsonData['value'] = calculation.value()

    if includeHierarchy and calculation.function():
        jsonData['valueFunc'] = _FunctionSerialiser.instance().serialise(
            function=calculation.function())

    return jsonData

def checkSerialisationVersion(
        jsonData: typing.Mapping[str, typing.Any],
        supportedVersion: packaging.version.Version,
        description: str
        ) -> None:
    version = jsonData.get('version')
    if version is None:
        return
    if not isinstance(version, str):
        raise RuntimeError(f'{description} version property is not a string')
    try:
        version = packaging.version.Version(version)
    except packaging.version.InvalidVersion:
        raise RuntimeError(f'{description} version property has invalid value {version}')
    if version.major != supportedVersion.major:
        raise RuntimeError(f'{description} version property has unsupported version {version}')

def deserialiseCalculation(
        jsonData: typing.Mapping[str, typing.Any],
        ) -> ScalarCalculation:
    checkSerialisationVersion(
        jsonData=jsonData,
        supportedVersion=_CalculationVersion,
        description='Calculation')

    name = jsonData.get('name')
    if name is not None and not isinstance(name, str):
        raise RuntimeError('Calculation name property is not a string')

    value = jsonData.get('value')
    if value is None:
        raise RuntimeError('Calculation is missing the value property')
    if not isinstance(value, (int, float)):
        raise RuntimeError('Calculation value property is not a number')

    function = jsonData.get('valueFunc')
    if function is not None:
        if not isinstance(function, dict):
            raise RuntimeError('Calculation valueFunc property is not a dictionary')
        try:
            function = _FunctionSerialiser.instance().deserialise(jsonData=function)
        except Exception as ex:
            message = \
                f'Failed to deserialise valueFunc property for calculation with name "{name}"' \
                if name else \
                'Failed to deserialise valueFunc property for unnamed calculation'
            logging.warning(message, exc_info=ex)
            function = None

    return ScalarCalculation(value=function if function else value, name=name)
